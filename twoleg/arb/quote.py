"""
Round-trip quote engine.

Computes what a base-asset amount turns into after base -> asset on
venue A and asset -> base on venue B, using the venues' view-only quotes.
No funds move here.
"""

from twoleg.arb.registry import AllowListRegistry
from twoleg.core.errors import (
    AssetUnapprovedError,
    QuoteUnavailableError,
    VenueUnapprovedError,
)
from twoleg.core.logging import LoggerMixin
from twoleg.domain.models import TradeQuote
from twoleg.venues.base import VenueConnector


def validate_amounts(venue: VenueConnector, amount_in: int, path: list[str], amounts) -> int:
    """
    Check a venue's amounts list and return the final output.

    Raises:
        QuoteUnavailableError: Wrong length, non-int or negative entries,
            or a first entry that is not the requested input.
    """
    if not isinstance(amounts, (list, tuple)) or len(amounts) != len(path):
        raise QuoteUnavailableError(
            f"{venue.address} returned {amounts!r} for a {len(path)}-element path",
            venue=venue.address,
        )
    for amount in amounts:
        if not isinstance(amount, int) or isinstance(amount, bool) or amount < 0:
            raise QuoteUnavailableError(
                f"{venue.address} returned invalid amount {amount!r}",
                venue=venue.address,
            )
    if amounts[0] != amount_in:
        raise QuoteUnavailableError(
            f"{venue.address} quoted input {amounts[0]}, expected {amount_in}",
            venue=venue.address,
        )
    return amounts[-1]


class QuoteEngine(LoggerMixin):
    """Round-trip quotes across two approved venues."""

    def __init__(self, registry: AllowListRegistry, base_asset: str):
        """
        Initialize quote engine.

        Args:
            registry: Allow-list consulted on every call
            base_asset: Identifier the engine's funds are held in
        """
        self.registry = registry
        self.base_asset = base_asset

    def check_participants(
        self,
        venue_a: VenueConnector,
        venue_b: VenueConnector,
        asset: str,
    ) -> None:
        """Raise the specific unapproved error for the first failing participant."""
        for venue in (venue_a, venue_b):
            if not self.registry.is_venue_approved(venue.address):
                raise VenueUnapprovedError(venue.address)
        if not self.registry.is_asset_approved(asset):
            raise AssetUnapprovedError(asset)

    def resolve_base(self, venue_a: VenueConnector, venue_b: VenueConnector) -> str:
        """Base identifier both venues route through; must match the engine's."""
        base = self._call(venue_a, "native_asset_address", venue_a.native_asset_address)
        other = self._call(venue_b, "native_asset_address", venue_b.native_asset_address)
        if base != other:
            raise QuoteUnavailableError(
                f"Venues disagree on base asset: {base} vs {other}",
                venue=venue_b.address,
            )
        if base != self.base_asset:
            raise QuoteUnavailableError(
                f"{venue_a.address} routes through {base}, engine holds {self.base_asset}",
                venue=venue_a.address,
            )
        return base

    def quote_leg(
        self,
        venue: VenueConnector,
        amount_in: int,
        path: list[str],
    ) -> int:
        """Validated single-leg output."""
        amounts = self._call(venue, "quote", venue.quote, amount_in, path)
        return validate_amounts(venue, amount_in, path, amounts)

    def compute_round_trip(
        self,
        venue_a: VenueConnector,
        venue_b: VenueConnector,
        asset: str,
        base_amount_in: int,
    ) -> TradeQuote:
        """
        Quote base -> asset on venue A, then the full output back on venue B.

        Args:
            venue_a: Venue for the inbound leg
            venue_b: Venue for the outbound leg
            asset: Token traded through
            base_amount_in: Base units to start with

        Returns:
            TradeQuote with token_out and round_trip_out

        Raises:
            VenueUnapprovedError, AssetUnapprovedError, QuoteUnavailableError
        """
        self.check_participants(venue_a, venue_b, asset)
        base = self.resolve_base(venue_a, venue_b)

        token_out = self.quote_leg(venue_a, base_amount_in, [base, asset])
        if token_out == 0:
            raise QuoteUnavailableError(
                f"{venue_a.address} quotes zero {asset} for {base_amount_in} {base}",
                venue=venue_a.address,
            )
        base_out = self.quote_leg(venue_b, token_out, [asset, base])

        quote = TradeQuote(
            venue_a=venue_a.address,
            venue_b=venue_b.address,
            asset=asset,
            base_asset=base,
            amount_in=base_amount_in,
            token_out=token_out,
            round_trip_out=base_out,
        )
        self.logger.debug(
            f"Round trip {base_amount_in} {base} -> {token_out} {asset} -> {base_out} {base}"
        )
        return quote

    def _call(self, venue: VenueConnector, operation: str, func, *args):
        try:
            return func(*args)
        except QuoteUnavailableError:
            raise
        except Exception as e:
            self.logger.warning(f"{venue.address} {operation} failed: {e}")
            raise QuoteUnavailableError(
                f"{venue.address} {operation} failed: {e}",
                venue=venue.address,
                cause=e,
            ) from e
