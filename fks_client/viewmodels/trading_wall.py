"""
View-model for the trading wall dashboard: clocks, ticker and metrics
"""
import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, List, Optional, Sequence, Tuple

from ..core.api_client import FksApiClient
from ..market_hours import build_world_clocks
from ..models import PortfolioMetricsResponse, TickerPrice, TimeframeMetricsResponse, WorldClock
from ..repositories.data import DataRepository
from .base import ViewModel

logger = logging.getLogger(__name__)

TICKER_SYMBOLS = (
    "EURUSD", "GBPUSD", "USDJPY", "USDCAD", "AUDUSD",
    "BTCUSDT", "ETHUSDT", "SPX", "NDX", "GOLD", "OIL"
)

CLOCK_INTERVAL = 1.0
TICKER_INTERVAL = 8.0
METRICS_INTERVAL = 5.0


@dataclass(frozen=True)
class TradingWallState:
    world_clocks: Tuple[WorldClock, ...] = ()
    ticker_prices: Tuple[TickerPrice, ...] = ()
    metrics: Optional[TimeframeMetricsResponse] = None
    portfolio_metrics: Optional[PortfolioMetricsResponse] = None
    connection_status: str = "Connecting"
    is_loading: bool = False
    error: Optional[str] = None


class TradingWallViewModel(ViewModel[TradingWallState]):
    """Runs three independent refresh loops.

    The loops do not coordinate; clock, ticker and metrics updates can land
    in any order.
    """

    def __init__(
        self,
        client: FksApiClient,
        data_repository: DataRepository,
        ticker_symbols: Sequence[str] = TICKER_SYMBOLS,
        clock_interval: float = CLOCK_INTERVAL,
        ticker_interval: float = TICKER_INTERVAL,
        metrics_interval: float = METRICS_INTERVAL,
    ):
        super().__init__(TradingWallState())
        self.client = client
        self.data_repository = data_repository
        self.ticker_symbols = tuple(ticker_symbols)
        self.clock_interval = clock_interval
        self.ticker_interval = ticker_interval
        self.metrics_interval = metrics_interval

        self.tasks: List[asyncio.Task] = []

    @property
    def is_running(self) -> bool:
        return any(not task.done() for task in self.tasks)

    async def start(self):
        """Run one update of each kind, then keep them going in the background"""
        if self.is_running:
            logger.warning("Trading wall is already running")
            return

        await self.refresh()

        self.tasks = [
            asyncio.create_task(self._periodic(self.clock_interval, self.update_clocks)),
            asyncio.create_task(self._periodic(self.ticker_interval, self.update_ticker)),
            asyncio.create_task(self._periodic(self.metrics_interval, self.update_metrics)),
        ]
        logger.info("Trading wall started")

    async def stop(self):
        tasks, self.tasks = self.tasks, []
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        logger.info("Trading wall stopped")

    async def refresh(self):
        self._update(is_loading=True, error=None)
        try:
            await self.update_clocks()
            await self.update_ticker()
            await self.update_metrics()
        finally:
            self._update(is_loading=False)

    async def _periodic(self, interval: float, update: Callable[[], Awaitable[None]]):
        while True:
            await asyncio.sleep(interval)
            await update()

    async def update_clocks(self):
        try:
            self._update(world_clocks=tuple(build_world_clocks()))
        except Exception as e:
            logger.debug(f"Clock update failed: {e}")

    async def update_ticker(self):
        """Fetch every ticker symbol in turn, skipping the ones that fail"""
        prices: List[TickerPrice] = []
        for symbol in self.ticker_symbols:
            try:
                quote = await self.data_repository.get_price(symbol, use_cache=True)
            except Exception as e:
                logger.debug(f"Ticker {symbol} skipped: {e}")
                continue
            prices.append(TickerPrice(symbol=symbol, price=quote.price, timestamp=quote.timestamp))

        if prices:
            status = f"Connected ({len(prices)}/{len(self.ticker_symbols)} symbols)"
        else:
            status = "No data available"
        self._update(ticker_prices=tuple(prices), connection_status=status)

    async def update_metrics(self):
        """Timeframe and dashboard metrics; either may be unavailable"""
        try:
            metrics = await self.client.get("/api/v1/timeframes/metrics", self.client.api_url,
                                            decoder=TimeframeMetricsResponse.from_dict)
            self._update(metrics=metrics)
        except Exception as e:
            logger.debug(f"Timeframe metrics unavailable: {e}")

        try:
            overview = await self.client.get("/api/dashboard/overview", self.client.api_url,
                                             decoder=PortfolioMetricsResponse.from_dict)
            self._update(portfolio_metrics=overview)
        except Exception as e:
            logger.debug(f"Dashboard overview unavailable: {e}")
