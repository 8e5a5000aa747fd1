"""
Repository for the market data service
"""
from typing import Dict, Optional

from ..core.api_client import FksApiClient
from ..models import HealthResponse, OHLCVResponse, PriceResponse


def _flag(value: bool) -> str:
    return "true" if value else "false"


class DataRepository:
    """Prices and candles from the data service"""

    def __init__(self, client: FksApiClient):
        self.client = client

    async def get_price(self, symbol: str, provider: Optional[str] = None,
                        use_cache: bool = True) -> PriceResponse:
        """Current price for ``symbol`` (e.g. "BTC/USD")"""
        params: Dict[str, str] = {"symbol": symbol}
        if provider:
            params["provider"] = provider
        params["use_cache"] = _flag(use_cache)

        return await self.client.get("/api/v1/data/price", self.client.data_url, params,
                                     decoder=PriceResponse.from_dict)

    async def get_ohlcv(self, symbol: str, interval: str = "1h", provider: Optional[str] = None,
                        use_cache: bool = True) -> OHLCVResponse:
        """Candles for ``symbol``; intervals 1m, 5m, 15m, 1h, 4h, 1d"""
        params: Dict[str, str] = {"symbol": symbol, "interval": interval}
        if provider:
            params["provider"] = provider
        params["use_cache"] = _flag(use_cache)

        return await self.client.get("/api/v1/data/ohlcv", self.client.data_url, params,
                                     decoder=OHLCVResponse.from_dict)

    async def get_btc_price(self) -> PriceResponse:
        return await self.get_price("BTC/USD")

    async def get_btc_hourly_candles(self) -> OHLCVResponse:
        return await self.get_ohlcv("BTC/USD", "1h")

    async def get_btc_daily_candles(self) -> OHLCVResponse:
        return await self.get_ohlcv("BTC/USD", "1d")

    async def get_health(self) -> HealthResponse:
        return await self.client.get("/health", self.client.data_url, decoder=HealthResponse.from_dict)
