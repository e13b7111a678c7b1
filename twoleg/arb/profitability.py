"""
Profitability evaluator.

Core Logic:
1. profit = max(0, base_out - base_in)
2. Profitable iff profit > 0 and profit * 1000 // base_in >= margin

The margin is in tenths of a percent (10 == 1%) and the comparison is
integer-only so large base-unit amounts never lose precision.
"""

from typing import Callable

from twoleg.core.logging import LoggerMixin
from twoleg.domain.models import MARGIN_SCALE, ArbitrageParameters, ProfitVerdict


def margin_ratio(profit: int, base_in: int) -> int:
    """Profit relative to input, in MARGIN_SCALE units, rounded down."""
    return profit * MARGIN_SCALE // base_in


def required_minimum_profit(base_in: int, margin_bps: int) -> int:
    """
    Smallest profit on base_in that clears the margin test.

    floor(p * 1000 / b) >= m  <=>  p >= ceil(m * b / 1000), and any trade
    needs at least one unit of profit.
    """
    return max(1, -(-margin_bps * base_in // MARGIN_SCALE))


class ProfitabilityEvaluator(LoggerMixin):
    """Decides whether a round trip is worth executing."""

    def __init__(self, params: Callable[[], ArbitrageParameters]):
        """
        Initialize evaluator.

        Args:
            params: Returns the current parameters. Read on every call since
                administration can change the margin at any time.
        """
        self._params = params

    @property
    def min_profit_margin_bps(self) -> int:
        return self._params().min_profit_margin_bps

    def evaluate(self, base_in: int, base_out: int) -> ProfitVerdict:
        """
        Evaluate a round trip.

        Args:
            base_in: Base units put in
            base_out: Base units coming back

        Returns:
            ProfitVerdict; profit is 0 whenever base_out <= base_in
        """
        if base_in <= 0 or base_out <= base_in:
            return ProfitVerdict(profitable=False, profit=0)

        profit = base_out - base_in
        ratio = margin_ratio(profit, base_in)
        profitable = ratio >= self.min_profit_margin_bps

        self.logger.debug(
            f"Evaluated {base_in} -> {base_out}: profit={profit}, "
            f"ratio={ratio}, margin={self.min_profit_margin_bps}, profitable={profitable}"
        )
        return ProfitVerdict(profitable=profitable, profit=profit)

    def required_minimum_profit(self, base_in: int) -> int:
        """Declared minimum profit for trading base_in at the current margin."""
        return required_minimum_profit(base_in, self.min_profit_margin_bps)
