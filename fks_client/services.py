"""
Wiring of one API client, one session and the repositories built on them
"""
import logging
from typing import Optional

from .config.models import ClientConfig
from .core.api_client import FksApiClient
from .core.token_manager import TokenManager
from .repositories import AuthRepository, DataRepository, PortfolioRepository, SignalRepository
from .viewmodels import (
    AuthViewModel, PortfolioViewModel, SignalViewModel,
    TradingWallViewModel, WebSocketViewModel
)

logger = logging.getLogger(__name__)


class FksServices:
    """Everything a front end needs, sharing one client and one session"""

    def __init__(self, client: FksApiClient, config: Optional[ClientConfig] = None):
        self.config = config or ClientConfig()
        self.client = client
        self.token_manager = TokenManager(client)

        self.auth = AuthRepository(client, self.token_manager, self.config.token_refresh_minutes)
        self.data = DataRepository(client)
        self.portfolio = PortfolioRepository(client)
        self.signals = SignalRepository(client)

    @classmethod
    def from_config(cls, config: ClientConfig) -> "FksServices":
        client = FksApiClient(
            api_url=config.api_url,
            auth_url=config.auth_url,
            data_url=config.data_url,
            portfolio_url=config.portfolio_url,
            requests_per_minute=config.requests_per_minute,
            request_timeout=config.request_timeout,
        )
        logger.debug(f"Services configured: api={config.api_url} auth={config.auth_url} "
                     f"data={config.data_url} portfolio={config.portfolio_url}")
        return cls(client, config)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self):
        self.token_manager.stop_auto_refresh()
        await self.client.close()

    def auth_view_model(self) -> AuthViewModel:
        return AuthViewModel(self.auth, self.token_manager)

    def portfolio_view_model(self) -> PortfolioViewModel:
        return PortfolioViewModel(self.portfolio, self.data)

    def signal_view_model(self) -> SignalViewModel:
        return SignalViewModel(self.signals)

    def trading_wall_view_model(self) -> TradingWallViewModel:
        return TradingWallViewModel(
            self.client,
            self.data,
            ticker_symbols=self.config.ticker_symbols,
            clock_interval=self.config.clock_interval,
            ticker_interval=self.config.ticker_interval,
            metrics_interval=self.config.metrics_interval,
        )

    def websocket_view_model(self) -> WebSocketViewModel:
        return WebSocketViewModel(self.signals, buffer_size=self.config.signal_buffer_size)
