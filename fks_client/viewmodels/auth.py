"""
View-model for login state
"""
import logging
from dataclasses import dataclass
from typing import Optional

from ..core.token_manager import TokenManager
from ..models import UserProfile
from ..repositories.auth import AuthRepository
from .base import ViewModel

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthState:
    is_authenticated: bool = False
    user_profile: Optional[UserProfile] = None
    is_loading: bool = False
    error: Optional[str] = None


class AuthViewModel(ViewModel[AuthState]):
    """Login, logout and session checks"""

    def __init__(self, auth_repository: AuthRepository, token_manager: TokenManager):
        super().__init__(AuthState())
        self.auth_repository = auth_repository
        self.token_manager = token_manager

        # A failed background refresh ends the session
        self._unsubscribe = token_manager.is_token_valid.subscribe(self._on_token_validity)

    def _on_token_validity(self, valid: bool):
        if not valid and self.current.is_authenticated:
            logger.info("Session expired")
            self._update(is_authenticated=False, user_profile=None)

    async def login(self, username: str, password: str) -> bool:
        async def action():
            await self.auth_repository.login(username, password)
            try:
                profile = await self.auth_repository.get_profile()
            except Exception:
                # token was stored by login; do not leave it behind
                self.token_manager.invalidate_token()
                raise
            return {"is_authenticated": True, "user_profile": profile}

        return await self._run_action(
            "Login failed", action,
            on_error={"is_authenticated": False, "user_profile": None},
        )

    async def logout(self):
        self._update(is_loading=True)
        try:
            await self.auth_repository.logout()
        except Exception as e:
            logger.warning(f"Logout error ignored: {e}")
        finally:
            self._update(is_authenticated=False, user_profile=None, is_loading=False)

    async def refresh_token(self) -> bool:
        try:
            await self.auth_repository.refresh_token()
            return True
        except Exception as e:
            logger.error(f"Token refresh failed: {e}")
            self._update(error=f"Token refresh failed: {e}", is_authenticated=False, user_profile=None)
            return False

    async def check_authentication(self) -> bool:
        """Probe the session by loading the profile"""
        try:
            profile = await self.auth_repository.get_profile()
        except Exception as e:
            logger.info(f"Not authenticated: {e}")
            self._update(is_authenticated=False, user_profile=None)
            return False
        self._update(is_authenticated=True, user_profile=profile)
        return True

    def close(self):
        self._unsubscribe()
