"""
Execution guard for arbitrage attempts.

Admission checks, in order:
1. Pause: administration can block all new attempts
2. Reentrancy: one attempt in flight, held for the whole attempt
3. Reserve: engine base balance must exceed the configured floor
4. Allow-list: both venues and the asset, re-checked at admission
5. Cooldown: fixed interval since the last successful execution

Any failing check aborts the attempt before funds move.
"""

from contextlib import contextmanager
from typing import Callable, Iterator

from twoleg.arb.quote import QuoteEngine
from twoleg.arb.state import EngineState
from twoleg.core.errors import (
    CooldownActiveError,
    ExecutionPausedError,
    InsufficientReserveError,
    ReentrantCallError,
)
from twoleg.core.logging import LoggerMixin
from twoleg.core.timeutil import Clock
from twoleg.domain.models import ArbitrageParameters
from twoleg.venues.base import VenueConnector


class ExecutionGuard(LoggerMixin):
    """Pause / reentrancy / reserve / allow-list / cooldown gate."""

    def __init__(
        self,
        state: EngineState,
        quotes: QuoteEngine,
        params: Callable[[], ArbitrageParameters],
        clock: Clock,
    ):
        self.state = state
        self.quotes = quotes
        self._params = params
        self.clock = clock

    @contextmanager
    def hold(self) -> Iterator[None]:
        """
        Checks 1-2: refuse when paused, then own the reentrancy lock.

        The lock is released on every exit path, including exceptions
        raised by the body.
        """
        if self.state.paused:
            raise ExecutionPausedError()

        if not self.state.try_acquire():
            self.logger.warning("Rejected reentrant arbitrage attempt")
            raise ReentrantCallError()

        try:
            yield
        finally:
            self.state.release()

    def admit(
        self,
        venue_a: VenueConnector,
        venue_b: VenueConnector,
        asset: str,
        base_balance: int,
    ) -> None:
        """
        Checks 3-5. Must be called while holding the lock.

        Raises:
            InsufficientReserveError, VenueUnapprovedError,
            AssetUnapprovedError, CooldownActiveError
        """
        params = self._params()

        if base_balance <= params.min_base_balance:
            raise InsufficientReserveError(
                f"Base balance {base_balance} does not exceed floor {params.min_base_balance}",
                balance=base_balance,
                required=params.min_base_balance,
            )

        self.quotes.check_participants(venue_a, venue_b, asset)

        remaining = self.state.cooldown_remaining(self.clock(), params.cooldown_seconds)
        if remaining > 0:
            raise CooldownActiveError(remaining)

        self.logger.debug(f"Admitted {venue_a.address} -> {asset} -> {venue_b.address}")
