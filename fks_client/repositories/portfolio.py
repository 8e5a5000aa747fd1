"""
Repository for the portfolio service
"""
import logging
from typing import List, Optional

from ..core.api_client import FksApiClient
from ..models import (
    AssetPriceResponse, CorrelationResponse, HealthResponse,
    PortfolioValueResponse, RebalancingPlanResponse, list_of
)

logger = logging.getLogger(__name__)


class PortfolioRepository:
    """Portfolio value, asset prices, correlations and rebalancing"""

    def __init__(self, client: FksApiClient):
        self.client = client

    async def get_portfolio_value(self) -> PortfolioValueResponse:
        return await self.client.get("/api/portfolio/value", self.client.portfolio_url,
                                     decoder=PortfolioValueResponse.from_dict)

    async def get_asset_prices(self, symbols: Optional[str] = None) -> List[AssetPriceResponse]:
        """Asset prices, optionally filtered by a comma-separated symbol list"""
        params = {"symbols": symbols} if symbols else None
        return await self.client.get("/api/assets/prices", self.client.portfolio_url, params,
                                     decoder=list_of(AssetPriceResponse))

    async def get_btc_price(self) -> AssetPriceResponse:
        """BTC row of the asset prices, or a zero-price placeholder when none comes back"""
        prices = await self.get_asset_prices("BTC")
        if prices:
            return prices[0]
        logger.warning("No BTC row in asset prices, using placeholder")
        return AssetPriceResponse(symbol="BTC", price_usd=0.0, price_btc=1.0)

    async def get_correlations(self, symbols: Optional[str] = None) -> List[CorrelationResponse]:
        params = {"symbols": symbols} if symbols else None
        return await self.client.get("/api/portfolio/correlations", self.client.portfolio_url, params,
                                     decoder=list_of(CorrelationResponse))

    async def get_rebalancing_plan(self, target_btc_allocation: float) -> RebalancingPlanResponse:
        """Plan to move the portfolio to ``target_btc_allocation`` (0.0-1.0)"""
        params = {"target_btc_allocation": str(target_btc_allocation)}
        return await self.client.get("/api/portfolio/rebalancing", self.client.portfolio_url, params,
                                     decoder=RebalancingPlanResponse.from_dict)

    async def get_health(self) -> HealthResponse:
        return await self.client.get("/health", self.client.portfolio_url, decoder=HealthResponse.from_dict)
