"""
View-model for signal lists
"""
from dataclasses import dataclass
from typing import List, Optional, Tuple

from ..models import SignalResponse, SignalSummaryResponse
from ..repositories.signals import SignalRepository
from .base import ViewModel


@dataclass(frozen=True)
class SignalState:
    signals: Tuple[SignalResponse, ...] = ()
    signal_summary: Optional[SignalSummaryResponse] = None
    selected_category: str = "swing"
    is_loading: bool = False
    error: Optional[str] = None


class SignalViewModel(ViewModel[SignalState]):

    def __init__(self, signal_repository: SignalRepository):
        super().__init__(SignalState())
        self.signal_repository = signal_repository

    async def load_signals(self, category: Optional[str] = None, symbols: Optional[str] = None,
                           ai_enhanced: bool = False) -> bool:
        category = category or self.current.selected_category
        self._update(selected_category=category)

        async def action():
            signals = await self.signal_repository.generate_signals(category, symbols, ai_enhanced)
            summary = await self.signal_repository.get_signal_summary()
            return {"signals": tuple(signals), "signal_summary": summary}

        return await self._run_action("Failed to load signals", action)

    async def load_bitcoin_signals(self) -> bool:
        self._update(selected_category="bitcoin")

        async def action():
            signals = await self.signal_repository.get_bitcoin_signals(ai_enhanced=True)
            summary = await self.signal_repository.get_signal_summary()
            return {"signals": tuple(signals), "signal_summary": summary}

        return await self._run_action("Failed to load Bitcoin signals", action)

    async def refresh(self) -> bool:
        return await self.load_signals()

    # Local filters over the last loaded list

    def get_signals_by_type(self, signal_type: str) -> List[SignalResponse]:
        wanted = signal_type.upper()
        return [s for s in self.current.signals if s.signal_type.upper() == wanted]

    def get_buy_signals(self) -> List[SignalResponse]:
        return self.get_signals_by_type("BUY")

    def get_sell_signals(self) -> List[SignalResponse]:
        return self.get_signals_by_type("SELL")

    def get_signals_by_strength(self, strength: str) -> List[SignalResponse]:
        wanted = strength.lower()
        return [s for s in self.current.signals if s.strength.lower() == wanted]

    def get_strong_signals(self) -> List[SignalResponse]:
        return self.get_signals_by_strength("strong")

    def get_high_confidence_signals(self, min_confidence: float = 0.8) -> List[SignalResponse]:
        return [s for s in self.current.signals if s.confidence >= min_confidence]

    def get_average_confidence(self) -> float:
        signals = self.current.signals
        if not signals:
            return 0.0
        return sum(s.confidence for s in signals) / len(signals)
