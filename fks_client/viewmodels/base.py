"""
Base view-model: one immutable state snapshot behind an Observable
"""
import asyncio
import logging
from dataclasses import replace
from typing import Any, Awaitable, Callable, Dict, Generic, Optional, TypeVar

from ..core.observable import Observable

logger = logging.getLogger(__name__)

S = TypeVar("S")


class ViewModel(Generic[S]):
    """Holds UI-facing state and runs user actions against repositories.

    ``S`` is a frozen dataclass with at least ``is_loading`` and ``error``.
    Every change produces a new snapshot, so subscribers never see a
    half-applied update.
    """

    def __init__(self, initial_state: S):
        self.state: Observable[S] = Observable(initial_state)

    @property
    def current(self) -> S:
        return self.state.value

    def _update(self, **changes):
        self.state.set(replace(self.state.value, **changes))

    def clear_error(self):
        self._update(error=None)

    async def _run_action(
        self,
        context: str,
        action: Callable[[], Awaitable[Dict[str, Any]]],
        on_error: Optional[Dict[str, Any]] = None,
    ) -> bool:
        """Loading on, run ``action``, commit its results or record the error, loading off.

        ``action`` returns the state fields to commit on success. On failure
        the previous results stay in place, apart from ``on_error`` overrides.
        """
        self._update(is_loading=True, error=None)
        try:
            results = await action()
        except Exception as e:
            logger.error(f"{context}: {e}")
            self._update(is_loading=False, error=f"{context}: {e}", **(on_error or {}))
            return False
        except asyncio.CancelledError:
            self._update(is_loading=False)
            raise
        self._update(is_loading=False, **(results or {}))
        return True
