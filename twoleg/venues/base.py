"""
Base class for venue connectors.

A venue is an external liquidity source quoting pairwise exchange rates
between the base asset and tokens. All connectors must:
- Inherit from VenueConnector
- Return one amount per path element from quote() and the swaps
- Refuse swaps after their deadline (SwapDeadlineExceededError)
- Refuse swaps whose output would be below amount_out_min
  (SwapSlippageExceededError)

The engine treats connectors as untrusted: quote shapes are validated and
swap outputs are measured on the ledger rather than taken from the
returned amounts.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from twoleg.core.logging import LoggerMixin


class VenueStatus(str, Enum):
    """Venue health status."""
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNAVAILABLE = "unavailable"


@dataclass
class HealthCheckResult:
    """Result of a venue health check."""
    status: VenueStatus
    message: str
    details: Optional[dict[str, Any]] = None


class VenueConnector(ABC, LoggerMixin):
    """
    Abstract venue connector.

    Subclasses must implement:
    - native_asset_address(): identifier of the venue's base asset
    - quote(): view-only output amounts along a path
    - swap_exact_in_for_out(): base -> token swap (inbound leg)
    - swap_exact_in_for_out_token(): token -> base swap (outbound leg)
    - healthcheck()
    """

    name: str = "venue"

    def __init__(self, address: str):
        """
        Initialize connector.

        Args:
            address: Identifier the allow-list knows this venue by.
        """
        self.address = address

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.address!r})"

    @abstractmethod
    def native_asset_address(self) -> str:
        """Identifier of the base asset this venue routes through."""

    @abstractmethod
    def quote(self, amount_in: int, path: list[str]) -> list[int]:
        """
        Output amounts for swapping amount_in along path.

        Pure: no state mutation, no funds movement.

        Returns:
            One amount per path element; [0] == amount_in, [-1] is the output.
        """

    @abstractmethod
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
        """
        Swap exactly amount_in of the base asset for a token.

        The venue pulls amount_in from sender and pays the output to
        recipient.
        """

    @abstractmethod
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
        """Swap exactly amount_in of a token back into the base asset."""

    @abstractmethod
    def healthcheck(self) -> HealthCheckResult:
        """Check whether the venue can currently quote and fill."""
