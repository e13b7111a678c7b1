"""Shared fixtures: a two-venue fixed-rate market on one ledger."""

import pytest

from twoleg.arb.admin import Administrator
from twoleg.arb.engine import ArbEngine
from twoleg.arb.ledger import Ledger
from twoleg.arb.registry import AllowListRegistry
from twoleg.domain.models import ArbitrageParameters
from twoleg.venues.simulated import FixedRateVenue

ETHER = 10 ** 18

BASE = "WETH"
TOKEN = "TKN"
OWNER = "owner"
CALLER = "alice"
ENGINE = "arb-engine"


class FakeClock:
    """Settable clock returning POSIX seconds."""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def ledger():
    ledger = Ledger()
    ledger.mint(CALLER, BASE, 10 * ETHER)
    return ledger


@pytest.fixture
def venue_a(ledger, clock):
    """Sells 100 TKN per WETH."""
    venue = FixedRateVenue(
        "dex-a", ledger, BASE, clock=clock, rates={(BASE, TOKEN): (100, 1)},
    )
    ledger.mint("dex-a", TOKEN, 10_000 * ETHER)
    return venue


@pytest.fixture
def venue_b(ledger, clock):
    """Buys TKN back at 1.02 WETH per 100 TKN."""
    venue = FixedRateVenue(
        "dex-b", ledger, BASE, clock=clock, rates={(TOKEN, BASE): (102, 10_000)},
    )
    ledger.mint("dex-b", BASE, 100 * ETHER)
    return venue


@pytest.fixture
def registry():
    return AllowListRegistry(venues=["dex-a", "dex-b"], assets=[TOKEN])


@pytest.fixture
def params():
    return ArbitrageParameters(
        min_profit_margin_bps=10,
        min_base_balance=0,
        cooldown_seconds=60,
        deadline_seconds=300,
        leg1_slippage_tolerance_bps=50,
    )


@pytest.fixture
def engine(ledger, registry, params, clock):
    return ArbEngine(
        ledger=ledger,
        registry=registry,
        params=params,
        base_asset=BASE,
        account=ENGINE,
        clock=clock,
    )


@pytest.fixture
def admin(engine):
    return Administrator(engine, owner=OWNER)
