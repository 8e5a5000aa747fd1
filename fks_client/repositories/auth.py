"""
Repository for the FKS auth service
"""
import logging

from ..core.api_client import FksApiClient
from ..core.token_manager import DEFAULT_REFRESH_MINUTES, TokenManager
from ..models import HealthResponse, LoginRequest, TokenResponse, UserProfile

logger = logging.getLogger(__name__)


class AuthRepository:
    """Login/logout/refresh lifecycle plus profile and health lookups"""

    def __init__(self, client: FksApiClient, token_manager: TokenManager,
                 default_refresh_minutes: int = DEFAULT_REFRESH_MINUTES):
        self.client = client
        self.token_manager = token_manager
        self.default_refresh_minutes = default_refresh_minutes

    async def login(self, username: str, password: str) -> TokenResponse:
        """Authenticate, store the token and start auto-refresh"""
        if not username or not password:
            raise ValueError("Username and password are required")

        response = await self.client.post(
            "/api/v1/auth/login",
            LoginRequest(username, password),
            base_url=self.client.auth_url,
            decoder=TokenResponse.from_dict,
        )

        self.client.set_auth_token(response.access_token)
        self.token_manager.mark_token_valid()
        self.token_manager.set_refresh_callback(self.refresh_token)
        self.token_manager.start_auto_refresh(self.refresh_interval_minutes(response))

        logger.info(f"Logged in as {username}")
        return response

    def refresh_interval_minutes(self, response: TokenResponse) -> int:
        if response.expires_in is None:
            return self.default_refresh_minutes
        return max(1, response.expires_in // 60)

    async def logout(self):
        """Notify the server if possible; the local session always ends"""
        try:
            await self.client.post("/api/v1/auth/logout", base_url=self.client.auth_url)
        except Exception as e:
            logger.warning(f"Logout notification failed: {e}")
        finally:
            self.token_manager.invalidate_token()
            logger.info("Logged out")

    async def refresh_token(self) -> TokenResponse:
        response = await self.client.post(
            "/api/v1/auth/refresh",
            base_url=self.client.auth_url,
            decoder=TokenResponse.from_dict,
        )
        self.client.set_auth_token(response.access_token)
        return response

    async def get_profile(self) -> UserProfile:
        return await self.client.get("/api/v1/auth/me", self.client.auth_url, decoder=UserProfile.from_dict)

    async def get_health(self) -> HealthResponse:
        return await self.client.get("/health", self.client.auth_url, decoder=HealthResponse.from_dict)
