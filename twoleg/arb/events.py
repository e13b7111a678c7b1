"""
Trade event emission.

Subscribers receive each TradeResult once, after the execution that
produced it has committed. Subscriber failures are logged and never
affect the trade.
"""

import threading
from typing import Callable

from twoleg.core.logging import LoggerMixin
from twoleg.domain.models import TradeResult

TradeListener = Callable[[TradeResult], None]


class TradeEventEmitter(LoggerMixin):
    """In-process fan-out of TradeResult records."""

    def __init__(self):
        self._listeners: list[TradeListener] = []
        self._lock = threading.Lock()

    def subscribe(self, listener: TradeListener) -> None:
        with self._lock:
            if listener not in self._listeners:
                self._listeners.append(listener)

    def unsubscribe(self, listener: TradeListener) -> None:
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def emit(self, result: TradeResult) -> None:
        self.logger.info(f"TradeResult {result.to_dict()}")

        with self._lock:
            listeners = list(self._listeners)

        for listener in listeners:
            try:
                listener(result)
            except Exception as e:
                self.logger.error(f"Trade listener {listener!r} failed: {e}", exc_info=True)
