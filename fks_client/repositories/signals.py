"""
Repository for trading signals
"""
import logging
from typing import AsyncIterator, List, Optional

from ..core.api_client import FksApiClient
from ..models import SignalResponse, SignalSummaryResponse, list_of

logger = logging.getLogger(__name__)

SIGNAL_CATEGORIES = (
    "swing", "scalp", "position", "day", "crypto",
    "forex", "stocks", "futures", "bitcoin"
)


class SignalRepository:
    """Signal generation, summary and the live signal stream"""

    def __init__(self, client: FksApiClient):
        self.client = client
        self.last_signals: List[SignalResponse] = []

    async def generate_signals(self, category: str = "swing", symbols: Optional[str] = None,
                               ai_enhanced: bool = False) -> List[SignalResponse]:
        """
        Generate signals for a category

        Args:
            category: One of SIGNAL_CATEGORIES
            symbols: Optional comma-separated symbol list
            ai_enhanced: Ask the backend for AI-enhanced analysis
        """
        params = {"category": category}
        if symbols:
            params["symbols"] = symbols
        params["ai_enhanced"] = "true" if ai_enhanced else "false"

        signals = await self.client.get("/api/signals/generate", self.client.portfolio_url, params,
                                        decoder=list_of(SignalResponse))
        self.last_signals = signals
        logger.debug(f"Fetched {len(signals)} {category} signals")
        return signals

    async def get_bitcoin_signals(self, ai_enhanced: bool = True) -> List[SignalResponse]:
        return await self.generate_signals(category="bitcoin", symbols="BTC/USD,BTC/USDT",
                                           ai_enhanced=ai_enhanced)

    async def get_signal_summary(self) -> SignalSummaryResponse:
        return await self.client.get("/api/signals/summary", self.client.portfolio_url,
                                     decoder=SignalSummaryResponse.from_dict)

    def connect_signal_stream(self) -> AsyncIterator[str]:
        """Raw text frames from the signal WebSocket"""
        return self.client.connect_websocket("/api/signals/stream", self.client.portfolio_url)

    def get_strong_signals(self) -> List[SignalResponse]:
        """Strong signals among the last fetched list; does not re-fetch"""
        return [s for s in self.last_signals if s.strength.lower() == "strong"]

    def get_high_confidence_signals(self, min_confidence: float = 0.8) -> List[SignalResponse]:
        return [s for s in self.last_signals if s.confidence >= min_confidence]
