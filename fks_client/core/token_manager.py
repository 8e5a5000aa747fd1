"""
Session state and automatic JWT refresh
"""
import asyncio
import logging
from typing import Awaitable, Callable, Optional

from .api_client import FksApiClient
from .observable import Observable

logger = logging.getLogger(__name__)

DEFAULT_REFRESH_MINUTES = 15

RefreshCallback = Callable[[], Awaitable[object]]


class TokenManager:
    """Tracks token validity and runs the background refresh loop.

    One instance per session; it is handed to every repository and view-model
    that needs it. At most one refresh task is alive at any time.
    """

    def __init__(self, client: FksApiClient):
        self.client = client
        self.is_token_valid: Observable[bool] = Observable(False)

        self._refresh_task: Optional[asyncio.Task] = None
        self._refresh_callback: Optional[RefreshCallback] = None

    @property
    def is_refreshing(self) -> bool:
        return self._refresh_task is not None and not self._refresh_task.done()

    def set_refresh_callback(self, callback: RefreshCallback):
        self._refresh_callback = callback

    def start_auto_refresh(self, interval_minutes: float = DEFAULT_REFRESH_MINUTES):
        """Replace any running refresh loop with a new one"""
        self.stop_auto_refresh()
        self.is_token_valid.set(True)

        self._refresh_task = asyncio.create_task(self._refresh_loop(interval_minutes))
        logger.info(f"Token auto-refresh started, every {interval_minutes} min")

    def stop_auto_refresh(self):
        if self._refresh_task is not None:
            self._refresh_task.cancel()
            self._refresh_task = None

    def mark_token_valid(self):
        self.is_token_valid.set(True)

    def invalidate_token(self):
        """Drop the session: validity off, refresh loop stopped, client token cleared"""
        self.is_token_valid.set(False)
        self.stop_auto_refresh()
        self.client.clear_auth_token()

    async def _refresh_loop(self, interval_minutes: float):
        try:
            while True:
                await asyncio.sleep(interval_minutes * 60)
                try:
                    if self._refresh_callback is not None:
                        await self._refresh_callback()
                    self.is_token_valid.set(True)
                    logger.debug("Token refreshed")
                except Exception as e:
                    logger.warning(f"Token refresh failed, ending session: {e}")
                    # detach before invalidating, the loop ends here
                    self._refresh_task = None
                    self.invalidate_token()
                    break
        except asyncio.CancelledError:
            logger.debug("Token auto-refresh cancelled")
            raise
