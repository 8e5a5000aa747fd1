"""
View-model for the live signal stream
"""
import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from ..models import SignalResponse
from ..repositories.signals import SignalRepository
from .base import ViewModel

logger = logging.getLogger(__name__)

SIGNAL_BUFFER_SIZE = 50


@dataclass(frozen=True)
class WebSocketState:
    is_connected: bool = False
    latest_signal: Optional[SignalResponse] = None
    signal_updates: Tuple[SignalResponse, ...] = ()
    is_loading: bool = False
    error: Optional[str] = None


class WebSocketViewModel(ViewModel[WebSocketState]):
    """Subscribes to the signal stream and keeps the most recent signals"""

    def __init__(self, signal_repository: SignalRepository, buffer_size: int = SIGNAL_BUFFER_SIZE):
        super().__init__(WebSocketState())
        self.signal_repository = signal_repository
        self.buffer_size = buffer_size
        self.task: Optional[asyncio.Task] = None

    async def connect(self) -> bool:
        """Open the stream in the background; no-op while already connected"""
        if self.current.is_connected:
            return False

        self._update(is_connected=True, error=None)
        self.task = asyncio.create_task(self._listen())
        return True

    async def disconnect(self):
        task, self.task = self.task, None
        if task is not None:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        self._update(is_connected=False, error=None)

    async def _listen(self):
        try:
            async for message in self.signal_repository.connect_signal_stream():
                self._handle_message(message)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"Signal stream error: {e}")
            self._update(is_connected=False, error=f"WebSocket error: {e}")
            return
        logger.info("Signal stream ended")
        self._update(is_connected=False)

    def _handle_message(self, message: str):
        try:
            signal = SignalResponse.from_dict(json.loads(message))
        except (ValueError, TypeError) as e:
            # other message types share the stream
            logger.debug(f"Unparsed stream message: {message[:200]}")
            self._update(error=f"Failed to parse: {e}")
            return

        updates = (self.current.signal_updates + (signal,))[-self.buffer_size:]
        self._update(latest_signal=signal, signal_updates=updates)

    def clear_updates(self):
        self._update(signal_updates=(), latest_signal=None)

    def get_update_count(self) -> int:
        return len(self.current.signal_updates)
