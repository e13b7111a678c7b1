"""Tests for round-trip quoting."""

import pytest

from twoleg.arb.quote import QuoteEngine
from twoleg.core.errors import (
    AssetUnapprovedError,
    QuoteUnavailableError,
    UnapprovedParticipantError,
    VenueUnapprovedError,
)
from twoleg.venues.base import HealthCheckResult, VenueConnector, VenueStatus

from conftest import BASE, ETHER, TOKEN


class ScriptedVenue(VenueConnector):
    """Venue whose quote returns whatever the test sets."""

    def __init__(self, address, amounts=None, error=None, base=BASE):
        super().__init__(address)
        self.amounts = amounts
        self.error = error
        self.base = base

    def native_asset_address(self):
        return self.base

    def quote(self, amount_in, path):
        if self.error:
            raise self.error
        return self.amounts

    def swap_exact_in_for_out(self, *args, **kwargs):
        raise AssertionError("quotes must not swap")

    swap_exact_in_for_out_token = swap_exact_in_for_out

    def healthcheck(self):
        return HealthCheckResult(status=VenueStatus.HEALTHY, message="OK")


class TestComputeRoundTrip:
    """Tests for QuoteEngine.compute_round_trip."""

    @pytest.fixture
    def quotes(self, registry):
        return QuoteEngine(registry, BASE)

    def test_round_trip_amounts(self, quotes, venue_a, venue_b):
        """Test that the round trip chains venue A's output into venue B."""
        quote = quotes.compute_round_trip(venue_a, venue_b, TOKEN, ETHER)

        assert quote.amount_in == ETHER
        assert quote.token_out == 100 * ETHER
        assert quote.round_trip_out == 102 * ETHER // 100
        assert quote.venue_a == "dex-a"
        assert quote.venue_b == "dex-b"
        assert quote.base_asset == BASE

    def test_quote_moves_no_funds(self, quotes, ledger, venue_a, venue_b):
        """Test that quoting leaves every balance untouched."""
        before = ledger.balances()

        quotes.compute_round_trip(venue_a, venue_b, TOKEN, ETHER)

        assert ledger.balances() == before

    def test_unapproved_venue_a(self, quotes, registry, venue_a, venue_b):
        """Test that a disabled venue A raises VenueUnapprovedError."""
        registry.set_venue_approval("dex-a", False)

        with pytest.raises(VenueUnapprovedError) as exc:
            quotes.compute_round_trip(venue_a, venue_b, TOKEN, ETHER)

        assert exc.value.venue == "dex-a"
        assert isinstance(exc.value, UnapprovedParticipantError)

    def test_never_added_venue(self, quotes, venue_a):
        """Test that a venue absent from the allow-list is refused."""
        stranger = ScriptedVenue("dex-x", amounts=[100 * ETHER, ETHER])

        with pytest.raises(VenueUnapprovedError):
            quotes.compute_round_trip(venue_a, stranger, TOKEN, ETHER)

    def test_unapproved_asset(self, quotes, registry, venue_a, venue_b):
        """Test that a disabled asset raises AssetUnapprovedError."""
        registry.set_token_approval(TOKEN, False)

        with pytest.raises(AssetUnapprovedError) as exc:
            quotes.compute_round_trip(venue_a, venue_b, TOKEN, ETHER)

        assert exc.value.code == "ASSET_UNAPPROVED"

    def test_venue_without_rate(self, quotes, venue_a, venue_b):
        """Test that a venue that cannot quote raises QuoteUnavailableError."""
        with pytest.raises(QuoteUnavailableError) as exc:
            quotes.compute_round_trip(venue_b, venue_a, TOKEN, ETHER)

        assert exc.value.venue == "dex-b"

    def test_zero_leg1_output(self, quotes, registry, venue_b):
        """Test that a zero token output is treated as no quote."""
        registry.set_venue_approval("dex-z", True)
        zero = ScriptedVenue("dex-z", amounts=[ETHER, 0])

        with pytest.raises(QuoteUnavailableError):
            quotes.compute_round_trip(zero, venue_b, TOKEN, ETHER)

    def test_base_mismatch(self, quotes, registry, venue_b):
        """Test that venues routing through another base asset are refused."""
        registry.set_venue_approval("dex-w", True)
        other = ScriptedVenue("dex-w", amounts=[ETHER, 100 * ETHER], base="WBTC")

        with pytest.raises(QuoteUnavailableError):
            quotes.compute_round_trip(other, venue_b, TOKEN, ETHER)


class TestUntrustedQuotes:
    """Tests that venue quote shapes are validated."""

    @pytest.fixture
    def quotes(self, registry):
        registry.set_venue_approval("dex-s", True)
        return QuoteEngine(registry, BASE)

    @pytest.mark.parametrize(
        "amounts",
        [
            None,
            [],
            [ETHER],
            [ETHER, 5, 5],
            [ETHER, -1],
            [ETHER, 1.5],
            [ETHER, "100"],
            [ETHER - 1, 100],
            [ETHER, True],
        ],
    )
    def test_malformed_amounts(self, quotes, amounts):
        """Test that malformed quote results raise QuoteUnavailableError."""
        venue = ScriptedVenue("dex-s", amounts=amounts)

        with pytest.raises(QuoteUnavailableError):
            quotes.quote_leg(venue, ETHER, [BASE, TOKEN])

    def test_venue_exception_is_wrapped(self, quotes):
        """Test that arbitrary venue exceptions become QuoteUnavailableError."""
        venue = ScriptedVenue("dex-s", error=ZeroDivisionError("boom"))

        with pytest.raises(QuoteUnavailableError) as exc:
            quotes.quote_leg(venue, ETHER, [BASE, TOKEN])

        assert isinstance(exc.value.cause, ZeroDivisionError)
        assert exc.value.details["cause"] == "boom"

    def test_valid_amounts(self, quotes):
        venue = ScriptedVenue("dex-s", amounts=[ETHER, 42])

        assert quotes.quote_leg(venue, ETHER, [BASE, TOKEN]) == 42
