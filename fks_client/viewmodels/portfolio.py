"""
View-model for the portfolio dashboard
"""
import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from ..models import (
    AssetPriceResponse, CorrelationResponse, PortfolioValueResponse,
    PriceResponse, RebalancingPlanResponse
)
from ..repositories.data import DataRepository
from ..repositories.portfolio import PortfolioRepository
from .base import ViewModel

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PortfolioState:
    portfolio_value: Optional[PortfolioValueResponse] = None
    asset_prices: Tuple[AssetPriceResponse, ...] = ()
    correlations: Tuple[CorrelationResponse, ...] = ()
    btc_price: Optional[PriceResponse] = None
    rebalancing_plan: Optional[RebalancingPlanResponse] = None
    is_loading: bool = False
    error: Optional[str] = None


class PortfolioViewModel(ViewModel[PortfolioState]):

    def __init__(self, portfolio_repository: PortfolioRepository, data_repository: DataRepository):
        super().__init__(PortfolioState())
        self.portfolio_repository = portfolio_repository
        self.data_repository = data_repository

    async def load_portfolio(self) -> bool:
        """Value, asset prices, correlations and BTC/USD price, one after another"""
        async def action():
            value = await self.portfolio_repository.get_portfolio_value()
            prices = await self.portfolio_repository.get_asset_prices()
            correlations = await self.portfolio_repository.get_correlations()
            btc_price = await self.data_repository.get_btc_price()
            return {
                "portfolio_value": value,
                "asset_prices": tuple(prices),
                "correlations": tuple(correlations),
                "btc_price": btc_price,
            }

        return await self._run_action("Failed to load portfolio", action)

    async def refresh(self) -> bool:
        return await self.load_portfolio()

    async def get_rebalancing_plan(self, target_btc_allocation: float) -> Optional[RebalancingPlanResponse]:
        try:
            plan = await self.portfolio_repository.get_rebalancing_plan(target_btc_allocation)
        except Exception as e:
            logger.error(f"Failed to get rebalancing plan: {e}")
            self._update(error=f"Failed to get rebalancing plan: {e}")
            return None
        self._update(rebalancing_plan=plan)
        return plan

    def get_portfolio_value_usd(self) -> Optional[float]:
        """Total BTC holdings priced at the last BTC/USD quote"""
        state = self.current
        if state.portfolio_value is None or state.btc_price is None:
            return None
        return state.portfolio_value.total_btc * state.btc_price.price
