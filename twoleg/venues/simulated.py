"""
Ledger-backed simulated venues.

Reserves are the venue's own balances on the shared Ledger, so a swap is
two ledger transfers and rolling the ledger back also rolls the venue
back. Used for paper trading, the keeper demo and tests.

- ConstantProductVenue: x * y = k pool with a fee, Uniswap-v2 style
- FixedRateVenue: fixed numerator/denominator per direction
"""

from abc import abstractmethod
from typing import Any, Optional

from twoleg.arb.ledger import Ledger
from twoleg.core.errors import SwapDeadlineExceededError, SwapSlippageExceededError
from twoleg.core.timeutil import Clock, system_clock
from twoleg.venues.base import HealthCheckResult, VenueConnector, VenueStatus

FEE_DENOMINATOR = 10_000


class SimulatedVenue(VenueConnector):
    """Common swap plumbing for ledger-backed venues."""

    name = "simulated"

    def __init__(
        self,
        address: str,
        ledger: Ledger,
        base_asset: str,
        clock: Clock = system_clock,
    ):
        super().__init__(address)
        self.ledger = ledger
        self.base_asset = base_asset
        self.clock = clock

    def native_asset_address(self) -> str:
        return self.base_asset

    def reserve(self, asset: str) -> int:
        return self.ledger.balance_of(self.address, asset)

    @abstractmethod
    def _amount_out(self, amount_in: int, asset_in: str, asset_out: str) -> int:
        """Output for a single hop. Raise ValueError when it cannot be filled."""

    def quote(self, amount_in: int, path: list[str]) -> list[int]:
        self._check_path(path)
        if amount_in <= 0:
            raise ValueError(f"amount_in must be positive, got {amount_in}")
        return [amount_in, self._amount_out(amount_in, path[0], path[1])]

    def swap_exact_in_for_out(
        self,
        amount_in: int,
        amount_out_min: int,
        path: list[str],
        recipient: str,
        deadline: float,
        *,
        sender: str,
    ) -> list[int]:
        if path[0] != self.base_asset:
            raise ValueError(f"Inbound swap must start at {self.base_asset}, got {path[0]}")
        return self._swap(amount_in, amount_out_min, path, recipient, deadline, sender)

    def swap_exact_in_for_out_token(
        self,
        amount_in: int,
        amount_out_min: int,
        path: list[str],
        recipient: str,
        deadline: float,
        *,
        sender: str,
    ) -> list[int]:
        if path[-1] != self.base_asset:
            raise ValueError(f"Outbound swap must end at {self.base_asset}, got {path[-1]}")
        return self._swap(amount_in, amount_out_min, path, recipient, deadline, sender)

    def _swap(
        self,
        amount_in: int,
        amount_out_min: int,
        path: list[str],
        recipient: str,
        deadline: float,
        sender: str,
    ) -> list[int]:
        now = self.clock()
        if now > deadline:
            raise SwapDeadlineExceededError(deadline=deadline, now=now)

        amounts = self.quote(amount_in, path)
        amount_out = amounts[-1]
        if amount_out < amount_out_min:
            raise SwapSlippageExceededError(
                f"{self.address}: output {amount_out} below minimum {amount_out_min}",
                amount_out=amount_out,
                amount_out_min=amount_out_min,
            )

        self.ledger.transfer(sender, self.address, path[0], amount_in)
        self.ledger.transfer(self.address, recipient, path[-1], amount_out)

        self.logger.debug(
            f"{self.address} swapped {amount_in} {path[0]} -> {amount_out} {path[-1]}"
        )
        return amounts

    def _check_path(self, path: list[str]) -> None:
        if len(path) != 2:
            raise ValueError(f"Only single-hop paths are supported, got {path}")
        if self.base_asset not in path or path[0] == path[1]:
            raise ValueError(f"Path must pair {self.base_asset} with a token, got {path}")

    def healthcheck(self) -> HealthCheckResult:
        holdings = self.ledger.holdings(self.address)
        if not holdings.get(self.base_asset):
            return HealthCheckResult(
                status=VenueStatus.UNAVAILABLE,
                message="No base reserve",
                details=holdings,
            )
        if len(holdings) < 2:
            return HealthCheckResult(
                status=VenueStatus.DEGRADED,
                message="No token reserves",
                details=holdings,
            )
        return HealthCheckResult(status=VenueStatus.HEALTHY, message="OK", details=holdings)


class ConstantProductVenue(SimulatedVenue):
    """x * y = k pool per token, fee charged on the input."""

    name = "constant_product"

    def __init__(self, *args, fee_bps: int = 30, **kwargs):
        super().__init__(*args, **kwargs)
        if not 0 <= fee_bps < FEE_DENOMINATOR:
            raise ValueError(f"fee_bps must be in [0, {FEE_DENOMINATOR}), got {fee_bps}")
        self.fee_bps = fee_bps

    def _amount_out(self, amount_in: int, asset_in: str, asset_out: str) -> int:
        reserve_in = self.reserve(asset_in)
        reserve_out = self.reserve(asset_out)
        if reserve_in <= 0 or reserve_out <= 0:
            raise ValueError(f"No liquidity for {asset_in}/{asset_out} on {self.address}")

        amount_in_with_fee = amount_in * (FEE_DENOMINATOR - self.fee_bps)
        numerator = amount_in_with_fee * reserve_out
        denominator = reserve_in * FEE_DENOMINATOR + amount_in_with_fee
        return numerator // denominator


class FixedRateVenue(SimulatedVenue):
    """Pays amount_in * numerator // denominator, limited by its reserves."""

    name = "fixed_rate"

    def __init__(self, *args, rates: Optional[dict[tuple[str, str], tuple[int, int]]] = None, **kwargs):
        super().__init__(*args, **kwargs)
        self._rates: dict[tuple[str, str], tuple[int, int]] = {}
        for (asset_in, asset_out), (num, den) in (rates or {}).items():
            self.set_rate(asset_in, asset_out, num, den)

    def set_rate(self, asset_in: str, asset_out: str, numerator: int, denominator: int) -> None:
        if numerator < 0 or denominator <= 0:
            raise ValueError(f"Invalid rate {numerator}/{denominator}")
        self._rates[(asset_in, asset_out)] = (numerator, denominator)

    def _amount_out(self, amount_in: int, asset_in: str, asset_out: str) -> int:
        rate = self._rates.get((asset_in, asset_out))
        if rate is None:
            raise ValueError(f"No rate for {asset_in}->{asset_out} on {self.address}")

        amount_out = amount_in * rate[0] // rate[1]
        if amount_out > self.reserve(asset_out):
            raise ValueError(
                f"Insufficient {asset_out} liquidity on {self.address}: "
                f"need {amount_out}, have {self.reserve(asset_out)}"
            )
        return amount_out


def create_venue(
    spec: dict[str, Any],
    ledger: Ledger,
    base_asset: str,
    clock: Clock = system_clock,
) -> SimulatedVenue:
    """
    Build a simulated venue from a config.yaml `simulation.venues` entry.

    Example entries:
        {type: constant_product, address: dex-a, fee_bps: 30}
        {type: fixed_rate, address: dex-b,
         rates: [{in: WETH, out: TKN, numerator: 100, denominator: 1}]}
    """
    kind = spec.get("type", "constant_product")
    address = spec["address"]

    if kind == "constant_product":
        venue: SimulatedVenue = ConstantProductVenue(
            address, ledger, base_asset, clock=clock, fee_bps=int(spec.get("fee_bps", 30)),
        )
    elif kind == "fixed_rate":
        rates = {
            (r["in"], r["out"]): (int(r["numerator"]), int(r["denominator"]))
            for r in spec.get("rates", [])
        }
        venue = FixedRateVenue(address, ledger, base_asset, clock=clock, rates=rates)
    else:
        raise ValueError(f"Unknown venue type: {kind}")

    for asset, amount in (spec.get("reserves") or {}).items():
        ledger.mint(address, asset, int(amount))

    return venue
