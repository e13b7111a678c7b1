"""
Live execution state of the engine.

Owns the reentrancy lock, the pause switch, the auto-trade flag and the
last execution timestamp. Mutated only through the methods below: the
guard acquires/releases the lock, settlement records executions and
administration flips the flags.
"""

import threading
from typing import Optional

from twoleg.core.logging import LoggerMixin
from twoleg.domain.models import ExecutionState


class EngineState(LoggerMixin):
    """Lock-protected ExecutionState."""

    def __init__(self, initial: Optional[ExecutionState] = None):
        initial = initial or ExecutionState()
        self._mutex = threading.Lock()
        self._execution_lock = threading.Lock()
        self._paused = initial.paused
        self._auto_trade_enabled = initial.auto_trade_enabled
        self._last_execution_time = float(initial.last_execution_time)

    # ==============================================
    # Reentrancy lock
    # ==============================================

    def try_acquire(self) -> bool:
        """Take the execution lock without waiting. False if already held."""
        return self._execution_lock.acquire(blocking=False)

    def release(self) -> None:
        self._execution_lock.release()

    @property
    def locked(self) -> bool:
        return self._execution_lock.locked()

    # ==============================================
    # Flags
    # ==============================================

    @property
    def paused(self) -> bool:
        with self._mutex:
            return self._paused

    def set_paused(self, paused: bool) -> None:
        with self._mutex:
            self._paused = paused

    @property
    def auto_trade_enabled(self) -> bool:
        with self._mutex:
            return self._auto_trade_enabled

    def set_auto_trade_enabled(self, enabled: bool) -> None:
        with self._mutex:
            self._auto_trade_enabled = enabled

    # ==============================================
    # Cooldown
    # ==============================================

    @property
    def last_execution_time(self) -> float:
        with self._mutex:
            return self._last_execution_time

    def cooldown_remaining(self, now: float, interval: float) -> float:
        """Seconds until the next execution may start, 0 when allowed."""
        with self._mutex:
            if self._last_execution_time <= 0:
                return 0.0
            return max(0.0, self._last_execution_time + interval - now)

    def record_execution(self, now: float) -> float:
        """
        Advance the last execution time.

        Never moves backwards, even if the clock does.
        """
        with self._mutex:
            self._last_execution_time = max(self._last_execution_time, float(now))
            return self._last_execution_time

    # ==============================================
    # Transactional participant (timestamp only)
    # ==============================================

    def snapshot(self) -> float:
        return self.last_execution_time

    def restore(self, snapshot: float) -> None:
        with self._mutex:
            self._last_execution_time = snapshot

    def commit(self, snapshot: float) -> None:
        pass

    def to_model(self) -> ExecutionState:
        with self._mutex:
            return ExecutionState(
                auto_trade_enabled=self._auto_trade_enabled,
                last_execution_time=self._last_execution_time,
                reentrancy_lock=self._execution_lock.locked(),
                paused=self._paused,
            )
