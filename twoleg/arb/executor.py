"""
Two-leg swap executor.

Leg 1: the engine's whole base balance -> asset on venue A, floored by a
live re-quote minus the configured tolerance.
Leg 2: exactly the asset received -> base on venue B, floored at
base traded + required minimum profit, so a losing round trip fails here.

Venue return values are not trusted: every output is measured as a ledger
balance delta on the engine account. Must run inside the execution
boundary; a failure in either leg leaves rollback to the caller.
"""

from dataclasses import dataclass, asdict
from typing import Any, Callable

from twoleg.arb.ledger import Ledger
from twoleg.arb.profitability import ProfitabilityEvaluator
from twoleg.arb.quote import QuoteEngine
from twoleg.core.errors import ArbitrageError, SwapSlippageExceededError
from twoleg.core.logging import LoggerMixin
from twoleg.core.timeutil import Clock
from twoleg.domain.models import MARGIN_SCALE, ArbitrageParameters
from twoleg.venues.base import VenueConnector


@dataclass(frozen=True)
class LegsReport:
    """What the two legs actually did, measured on the ledger."""
    base_traded: int
    token_received: int
    base_received: int
    leg1_floor: int
    leg2_floor: int
    required_min_profit: int
    deadline: float

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def leg1_floor(quoted: int, tolerance_bps: int) -> int:
    """Minimum leg-1 output; a tolerance of 100% or more disables it."""
    if tolerance_bps >= MARGIN_SCALE:
        return 0
    return quoted * (MARGIN_SCALE - tolerance_bps) // MARGIN_SCALE


class SwapExecutor(LoggerMixin):
    """Runs leg 1 then leg 2 for the engine account."""

    def __init__(
        self,
        ledger: Ledger,
        account: str,
        quotes: QuoteEngine,
        evaluator: ProfitabilityEvaluator,
        params: Callable[[], ArbitrageParameters],
        clock: Clock,
    ):
        self.ledger = ledger
        self.account = account
        self.quotes = quotes
        self.evaluator = evaluator
        self._params = params
        self.clock = clock

    def execute(
        self,
        venue_a: VenueConnector,
        venue_b: VenueConnector,
        asset: str,
        base_asset: str,
    ) -> LegsReport:
        """
        Execute both legs.

        Raises:
            SwapSlippageExceededError: A leg produced less than its floor or
                the venue failed to fill.
            SwapDeadlineExceededError: A venue refused a stale swap.
            QuoteUnavailableError: The leg-1 re-quote failed.
        """
        params = self._params()
        base_traded = self.ledger.balance_of(self.account, base_asset)
        required = self.evaluator.required_minimum_profit(base_traded)
        deadline = self.clock() + params.deadline_seconds

        # Leg 1: base -> asset
        quoted = self.quotes.quote_leg(venue_a, base_traded, [base_asset, asset])
        floor1 = leg1_floor(quoted, params.leg1_slippage_tolerance_bps)

        token_received = self._run_leg(
            1,
            venue_a.swap_exact_in_for_out,
            venue_a,
            amount_in=base_traded,
            amount_out_min=floor1,
            path=[base_asset, asset],
            deadline=deadline,
        )
        if token_received == 0:
            raise SwapSlippageExceededError(
                f"{venue_a.address} delivered no {asset}",
                amount_out=0,
                amount_out_min=floor1,
                leg=1,
            )

        # Leg 2: asset -> base, floor carries the profit requirement
        floor2 = base_traded + required
        base_received = self._run_leg(
            2,
            venue_b.swap_exact_in_for_out_token,
            venue_b,
            amount_in=token_received,
            amount_out_min=floor2,
            path=[asset, base_asset],
            deadline=deadline,
        )

        report = LegsReport(
            base_traded=base_traded,
            token_received=token_received,
            base_received=base_received,
            leg1_floor=floor1,
            leg2_floor=floor2,
            required_min_profit=required,
            deadline=deadline,
        )
        self.logger.info(
            f"Legs done: {base_traded} {base_asset} -> {token_received} {asset} "
            f"-> {base_received} {base_asset}"
        )
        return report

    def _run_leg(
        self,
        leg: int,
        swap: Callable[..., list[int]],
        venue: VenueConnector,
        *,
        amount_in: int,
        amount_out_min: int,
        path: list[str],
        deadline: float,
    ) -> int:
        """Call the venue and return the measured output delta."""
        asset_out = path[-1]
        before = self.ledger.balance_of(self.account, asset_out)

        try:
            swap(
                amount_in,
                amount_out_min,
                path,
                self.account,
                deadline,
                sender=self.account,
            )
        except ArbitrageError:
            raise
        except Exception as e:
            self.logger.error(f"Leg {leg} on {venue.address} failed: {e}", exc_info=True)
            raise SwapSlippageExceededError(
                f"Leg {leg} on {venue.address} failed: {e}",
                amount_out_min=amount_out_min,
                leg=leg,
            ) from e

        received = self.ledger.balance_of(self.account, asset_out) - before
        if received < amount_out_min:
            raise SwapSlippageExceededError(
                f"Leg {leg} on {venue.address} delivered {received} {asset_out}, "
                f"minimum {amount_out_min}",
                amount_out=received,
                amount_out_min=amount_out_min,
                leg=leg,
            )
        return received
