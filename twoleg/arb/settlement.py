"""
Settlement of an arbitrage attempt.

Verifies the realized profit against the required minimum, advances the
cooldown timestamp and pays the whole base balance out to the caller.
Runs inside the execution boundary: any failure here unwinds the legs.
"""

from twoleg.arb.ledger import Ledger
from twoleg.arb.state import EngineState
from twoleg.core.errors import NoProfitRealizedError, ProfitBelowMinimumError
from twoleg.core.logging import LoggerMixin
from twoleg.core.timeutil import Clock
from twoleg.domain.models import TradeResult


class Settlement(LoggerMixin):
    """Profit verification and disbursement."""

    def __init__(self, ledger: Ledger, account: str, state: EngineState, clock: Clock):
        self.ledger = ledger
        self.account = account
        self.state = state
        self.clock = clock

    def settle(
        self,
        *,
        caller: str,
        venue_a: str,
        venue_b: str,
        asset: str,
        base_asset: str,
        balance_before: int,
        required_min_profit: int,
    ) -> tuple[TradeResult, int]:
        """
        Verify and pay out.

        Returns:
            (TradeResult, amount paid to caller)

        Raises:
            NoProfitRealizedError: Balance did not grow.
            ProfitBelowMinimumError: Balance grew by less than required.
            FundTransferFailedError: Payout could not be applied.
        """
        balance_after = self.ledger.balance_of(self.account, base_asset)
        profit = balance_after - balance_before

        if profit <= 0:
            raise NoProfitRealizedError(
                balance_before=balance_before,
                balance_after=balance_after,
            )
        if profit < required_min_profit:
            raise ProfitBelowMinimumError(profit=profit, required=required_min_profit)

        executed_at = self.state.record_execution(self.clock())

        result = TradeResult(
            asset=asset,
            base_in=balance_before,
            base_out=balance_after,
            profit=profit,
            venue_a=venue_a,
            venue_b=venue_b,
            caller=caller,
            timestamp=executed_at,
        )

        self.ledger.transfer(self.account, caller, base_asset, balance_after)
        self.logger.info(f"Settled {asset} round trip: profit={profit}, paid {balance_after} to {caller}")
        return result, balance_after

    def refund(self, caller: str, base_asset: str, deposit: int) -> int:
        """Return an unchanged deposit when there was no opportunity."""
        self.ledger.transfer(self.account, caller, base_asset, deposit)
        self.logger.info(f"Refunded {deposit} {base_asset} to {caller}")
        return deposit
