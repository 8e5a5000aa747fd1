"""
Observable value holder with change callbacks
"""
import logging
from typing import Callable, Generic, List, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Observable(Generic[T]):
    """Holds the latest value and notifies subscribers when it changes.

    Setting a value equal to the current one is ignored, so subscribers only
    see real transitions.
    """

    def __init__(self, initial: T):
        self._value = initial
        self._callbacks: List[Callable[[T], None]] = []

    @property
    def value(self) -> T:
        return self._value

    def set(self, value: T):
        if value == self._value:
            return
        self._value = value
        self._notify_callbacks()

    def subscribe(self, callback: Callable[[T], None]) -> Callable[[], None]:
        """Register callback; returns a function that removes it again"""
        self._callbacks.append(callback)

        def unsubscribe():
            if callback in self._callbacks:
                self._callbacks.remove(callback)

        return unsubscribe

    def _notify_callbacks(self):
        for callback in list(self._callbacks):
            try:
                callback(self._value)
            except Exception as e:
                logger.error(f"Error in observable callback: {e}")
