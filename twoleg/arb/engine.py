"""
Arbitrage Engine.

Public entry point for two-leg arbitrage between two venues.

Flow of attempt_arbitrage:
1. Guard: refuse when paused, take the reentrancy lock
2. Deposit: caller's base funds move into the engine account
3. Quote: round trip base -> asset (venue A) -> base (venue B)
4. Evaluate: margin check; unprofitable -> refund deposit and stop
5. Admit: reserve floor, allow-list re-check, cooldown
6. Execute: leg 1 then leg 2
7. Settle: verify profit, advance cooldown, pay out to the caller
8. Persist execution state (failures logged), emit TradeResult

Steps 2-7 run inside one ExecutionBoundary: any error undoes every
balance change the attempt made and the cooldown timestamp before it
propagates.
"""

import threading
from typing import Optional

from twoleg.arb.boundary import ExecutionBoundary
from twoleg.arb.events import TradeEventEmitter
from twoleg.arb.executor import SwapExecutor
from twoleg.arb.guard import ExecutionGuard
from twoleg.arb.ledger import Ledger
from twoleg.arb.profitability import ProfitabilityEvaluator
from twoleg.arb.quote import QuoteEngine
from twoleg.arb.registry import AllowListRegistry
from twoleg.arb.settlement import Settlement
from twoleg.arb.state import EngineState
from twoleg.core.errors import ArbitrageError, InsufficientDepositError
from twoleg.core.logging import LoggerMixin
from twoleg.core.timeutil import Clock, system_clock
from twoleg.domain.models import (
    ArbitrageParameters,
    AttemptOutcome,
    AttemptStatus,
    TradeQuote,
)
from twoleg.services.persistence import StateStore
from twoleg.venues.base import VenueConnector


class ArbEngine(LoggerMixin):
    """
    Two-leg arbitrage engine.

    Coordinates quoting, evaluation, admission, execution and settlement
    for one engine account on a shared ledger.
    """

    def __init__(
        self,
        ledger: Ledger,
        registry: AllowListRegistry,
        params: ArbitrageParameters,
        base_asset: str,
        account: str = "arb-engine",
        state: Optional[EngineState] = None,
        clock: Clock = system_clock,
        state_store: Optional[StateStore] = None,
        events: Optional[TradeEventEmitter] = None,
    ):
        """
        Initialize arbitrage engine.

        Args:
            ledger: Balances substrate shared with the venues
            registry: Venue/asset allow-list
            params: Initial arbitrage parameters
            base_asset: Identifier of the base asset the engine holds
            account: Ledger account holding the engine's funds
            state: Execution state. Loaded from state_store, else fresh.
            clock: Returns POSIX seconds; drives cooldown and deadlines
            state_store: Where the execution state is persisted
            events: TradeResult emitter
        """
        self.ledger = ledger
        self.registry = registry
        self.params = params
        self.base_asset = base_asset
        self.account = account
        self.clock = clock
        self.state_store = state_store
        self._persist_lock = threading.Lock()
        self.events = events or TradeEventEmitter()

        if state is None:
            saved = state_store.load() if state_store else None
            state = EngineState(saved)
            if saved:
                self.logger.info(f"Restored execution state: {saved.to_dict()}")
        self.state = state

        self.quotes = QuoteEngine(registry, base_asset)
        self.evaluator = ProfitabilityEvaluator(self._current_params)
        self.guard = ExecutionGuard(self.state, self.quotes, self._current_params, clock)
        self.executor = SwapExecutor(
            ledger, account, self.quotes, self.evaluator, self._current_params, clock,
        )
        self.settlement = Settlement(ledger, account, self.state, clock)
        self.boundary = ExecutionBoundary(ledger, self.state)

    def _current_params(self) -> ArbitrageParameters:
        return self.params

    # ==============================================
    # Read-only helpers
    # ==============================================

    @property
    def base_balance(self) -> int:
        return self.ledger.balance_of(self.account, self.base_asset)

    def check_opportunity(
        self,
        venue_a: VenueConnector,
        venue_b: VenueConnector,
        asset: str,
        base_amount_in: int,
    ) -> tuple[TradeQuote, bool, int]:
        """
        Quote and evaluate without moving funds.

        Returns:
            (quote, profitable, profit)
        """
        quote = self.quotes.compute_round_trip(venue_a, venue_b, asset, base_amount_in)
        verdict = self.evaluator.evaluate(base_amount_in, quote.round_trip_out)
        return quote, verdict.profitable, verdict.profit

    # ==============================================
    # Entry point
    # ==============================================

    def attempt_arbitrage(
        self,
        caller: str,
        venue_a: VenueConnector,
        venue_b: VenueConnector,
        asset: str,
        deposit: int,
    ) -> AttemptOutcome:
        """
        Run the full evaluate -> guard -> execute -> settle pipeline.

        Args:
            caller: Ledger account paying the deposit and receiving funds
            venue_a: Venue for base -> asset
            venue_b: Venue for asset -> base
            asset: Token traded through
            deposit: Base units the caller puts in

        Returns:
            AttemptOutcome: EXECUTED with the TradeResult and payout, or
            NOT_PROFITABLE with the refunded deposit.

        Raises:
            ArbitrageError: Any guard, quote, swap or settlement failure.
                Nothing the attempt did survives it.
        """
        self.logger.info(
            f"Arbitrage attempt by {caller}: {venue_a.address} -> {asset} -> "
            f"{venue_b.address}, deposit={deposit}"
        )

        try:
            with self.guard.hold():
                with self.boundary.atomic():
                    outcome = self._run(caller, venue_a, venue_b, asset, deposit)
        except ArbitrageError as e:
            self.logger.warning(f"Arbitrage attempt failed: {e.to_dict()}")
            raise

        if outcome.result is not None:
            # Committed: a store failure must not turn the trade into an error
            try:
                self.persist_state()
            except Exception as e:
                self.logger.error(f"Failed to persist execution state: {e}", exc_info=True)
            self.events.emit(outcome.result)

        return outcome

    def _run(
        self,
        caller: str,
        venue_a: VenueConnector,
        venue_b: VenueConnector,
        asset: str,
        deposit: int,
    ) -> AttemptOutcome:
        params = self.params
        if deposit <= 0 or deposit < params.min_base_balance:
            raise InsufficientDepositError(
                f"Deposit {deposit} below minimum {params.min_base_balance}",
                balance=deposit,
                required=params.min_base_balance,
            )

        self.ledger.transfer(caller, self.account, self.base_asset, deposit)

        quote = self.quotes.compute_round_trip(venue_a, venue_b, asset, deposit)
        verdict = self.evaluator.evaluate(deposit, quote.round_trip_out)

        if not verdict.profitable:
            refunded = self.settlement.refund(caller, self.base_asset, deposit)
            self.logger.info(
                f"No opportunity: {deposit} -> {quote.round_trip_out}, "
                f"margin {params.min_profit_margin_bps}"
            )
            return AttemptOutcome(
                status=AttemptStatus.NOT_PROFITABLE,
                quote=quote,
                verdict=verdict,
                refunded=refunded,
            )

        balance_before = self.base_balance
        self.guard.admit(venue_a, venue_b, asset, balance_before)

        legs = self.executor.execute(venue_a, venue_b, asset, self.base_asset)

        result, payout = self.settlement.settle(
            caller=caller,
            venue_a=venue_a.address,
            venue_b=venue_b.address,
            asset=asset,
            base_asset=self.base_asset,
            balance_before=balance_before,
            required_min_profit=legs.required_min_profit,
        )

        return AttemptOutcome(
            status=AttemptStatus.EXECUTED,
            quote=quote,
            verdict=verdict,
            result=result,
            payout=payout,
            details={"legs": legs.to_dict()},
        )

    # ==============================================
    # State persistence
    # ==============================================

    def persist_state(self) -> None:
        """
        Save the execution state, if a store is configured.

        Snapshot and save happen under one lock so concurrent savers
        (settlement, administration) never write a stale state last.
        """
        if self.state_store is None:
            return
        with self._persist_lock:
            self.state_store.save(self.state.to_model())
