"""
Paper-trading setup.

Wires a ledger, allow-list, simulated venues, engine and administrator
from the `simulation` and `arbitrage` sections of config.yaml, so the CLI
and the keeper can run the real engine against in-process venues.
"""

from dataclasses import dataclass, field
from typing import Any, Optional

from twoleg.arb.admin import Administrator
from twoleg.arb.engine import ArbEngine
from twoleg.arb.ledger import Ledger
from twoleg.arb.registry import AllowListRegistry
from twoleg.core.config import Settings, get_settings
from twoleg.core.errors import ConfigurationError
from twoleg.core.logging import get_logger
from twoleg.core.timeutil import Clock, system_clock
from twoleg.domain.models import ArbitrageParameters
from twoleg.services.persistence import StateStore
from twoleg.venues.simulated import SimulatedVenue, create_venue

logger = get_logger("simulation")


@dataclass
class Route:
    """One venue A -> asset -> venue B round trip."""
    venue_a: str
    venue_b: str
    asset: str


@dataclass
class Simulation:
    """Everything a paper run needs."""
    ledger: Ledger
    registry: AllowListRegistry
    engine: ArbEngine
    admin: Administrator
    venues: dict[str, SimulatedVenue] = field(default_factory=dict)
    routes: list[Route] = field(default_factory=list)

    def venue(self, address: str) -> SimulatedVenue:
        try:
            return self.venues[address]
        except KeyError:
            raise ConfigurationError(f"Unknown venue in route: {address}") from None


def parse_routes(entries: list[dict[str, Any]]) -> list[Route]:
    """Routes from config entries {venue_a, venue_b, asset}."""
    routes = []
    for entry in entries or []:
        try:
            routes.append(Route(entry["venue_a"], entry["venue_b"], entry["asset"]))
        except KeyError as e:
            raise ConfigurationError(f"Route {entry} is missing {e}") from e
    return routes


def build_simulation(
    config: dict[str, Any],
    settings: Optional[Settings] = None,
    clock: Clock = system_clock,
    state_store: Optional[StateStore] = None,
) -> Simulation:
    """
    Build a paper-trading engine.

    Args:
        config: Full YAML configuration
        settings: Application settings (account names)
        clock: Engine and venue clock
        state_store: Execution state store, none for a throwaway run

    Returns:
        Simulation with every approved venue and the configured routes
    """
    settings = settings or get_settings()
    sim_config = config.get("simulation") or {}
    if not sim_config.get("venues"):
        raise ConfigurationError("simulation.venues is empty")

    base_asset = sim_config.get("base_asset", "WETH")
    params = ArbitrageParameters.from_config(config.get("arbitrage") or {})

    ledger = Ledger()
    venues = {}
    for spec in sim_config["venues"]:
        try:
            venue = create_venue(spec, ledger, base_asset, clock=clock)
        except (KeyError, ValueError) as e:
            raise ConfigurationError(f"Invalid venue {spec}: {e}") from e
        venues[venue.address] = venue

    registry = AllowListRegistry(
        venues=list(venues),
        assets=list(sim_config.get("approved_assets") or []),
    )

    for holder, holdings in (sim_config.get("balances") or {}).items():
        for asset, amount in holdings.items():
            ledger.mint(holder, asset, int(amount))

    engine = ArbEngine(
        ledger=ledger,
        registry=registry,
        params=params,
        base_asset=base_asset,
        account=settings.engine_address,
        clock=clock,
        state_store=state_store,
    )
    admin = Administrator(engine, owner=settings.owner_address)

    routes = parse_routes((config.get("keeper") or {}).get("routes") or [])

    logger.info(
        f"Simulation ready: {len(venues)} venues, {len(routes)} routes, base {base_asset}"
    )
    return Simulation(
        ledger=ledger,
        registry=registry,
        engine=engine,
        admin=admin,
        venues=venues,
        routes=routes,
    )
