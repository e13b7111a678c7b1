"""Tests for the paper-trading simulation and the keeper."""

from pathlib import Path

import pytest

from twoleg.core.config import Settings, load_yaml_config
from twoleg.core.errors import ConfigurationError
from twoleg.services.keeper import KeeperService, create_keeper_service
from twoleg.services.persistence import MemoryStateStore
from twoleg.services.simulation import build_simulation, parse_routes

from conftest import ETHER, FakeClock

PROJECT_CONFIG = Path(__file__).resolve().parent.parent / "config" / "config.yaml"


@pytest.fixture
def settings():
    return Settings(owner_address="owner", keeper_address="keeper", engine_address="arb-engine")


@pytest.fixture
def config():
    return {
        "arbitrage": {"min_profit_margin_bps": 10, "cooldown_seconds": 60},
        "keeper": {
            "interval_seconds": 5,
            "deposit": ETHER,
            "routes": [{"venue_a": "dex-a", "venue_b": "dex-b", "asset": "TKN"}],
        },
        "simulation": {
            "base_asset": "WETH",
            "approved_assets": ["TKN"],
            "balances": {"keeper": {"WETH": 10 * ETHER}},
            "venues": [
                {
                    "type": "constant_product",
                    "address": "dex-a",
                    "fee_bps": 30,
                    "reserves": {"WETH": 1000 * ETHER, "TKN": 100_000 * ETHER},
                },
                {
                    "type": "constant_product",
                    "address": "dex-b",
                    "fee_bps": 30,
                    "reserves": {"WETH": 1000 * ETHER, "TKN": 95_000 * ETHER},
                },
            ],
        },
    }


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def simulation(config, settings, clock):
    return build_simulation(config, settings=settings, clock=clock, state_store=MemoryStateStore())


class TestBuildSimulation:
    """Tests for build_simulation."""

    def test_wires_everything(self, simulation):
        assert set(simulation.venues) == {"dex-a", "dex-b"}
        assert simulation.registry.is_venue_approved("dex-a")
        assert simulation.registry.is_asset_approved("TKN")
        assert simulation.ledger.balance_of("keeper", "WETH") == 10 * ETHER
        assert simulation.engine.account == "arb-engine"
        assert simulation.admin.owner == "owner"
        assert len(simulation.routes) == 1

    def test_route_is_profitable(self, simulation):
        """Test that the configured pools are about 4% apart."""
        route = simulation.routes[0]
        _, profitable, profit = simulation.engine.check_opportunity(
            simulation.venue(route.venue_a),
            simulation.venue(route.venue_b),
            route.asset,
            ETHER,
        )

        assert profitable is True
        assert ETHER * 4 // 100 < profit < ETHER * 5 // 100

    def test_no_venues(self, settings):
        with pytest.raises(ConfigurationError):
            build_simulation({"simulation": {}}, settings=settings)

    def test_bad_venue(self, config, settings):
        config["simulation"]["venues"].append({"type": "orderbook", "address": "x"})

        with pytest.raises(ConfigurationError):
            build_simulation(config, settings=settings)

    def test_unknown_route_venue(self, simulation):
        with pytest.raises(ConfigurationError):
            simulation.venue("dex-z")

    def test_incomplete_route(self):
        with pytest.raises(ConfigurationError):
            parse_routes([{"venue_a": "dex-a", "asset": "TKN"}])

    def test_project_config_builds(self, settings):
        """Test that the shipped config.yaml describes a working simulation."""
        config = load_yaml_config(str(PROJECT_CONFIG))

        simulation = build_simulation(config, settings=settings)

        assert simulation.routes
        assert simulation.engine.params.min_profit_margin_bps == 10


class TestKeeperService:
    """Tests for KeeperService."""

    @pytest.fixture
    def keeper(self, simulation, config, settings):
        return create_keeper_service(simulation, config, settings=settings)

    def test_created_from_config(self, keeper):
        assert keeper.caller == "keeper"
        assert keeper.deposit == ETHER
        assert keeper.interval_seconds == 5

    def test_skips_when_auto_trade_disabled(self, keeper, simulation):
        before = simulation.ledger.balances()

        assert keeper.run_once() == []
        assert simulation.ledger.balances() == before

    def test_trades_when_enabled(self, keeper, simulation):
        simulation.admin.set_auto_trade_enabled("owner", True)

        outcomes = keeper.run_once()

        assert len(outcomes) == 1
        assert outcomes[0].executed
        assert simulation.ledger.balance_of("keeper", "WETH") > 10 * ETHER

    def test_arbitrage_errors_do_not_stop_the_keeper(self, keeper, simulation, clock):
        """Test that a cooldown refusal is logged and the tick carries on."""
        simulation.admin.set_auto_trade_enabled("owner", True)
        keeper.run_once()
        balance = simulation.ledger.balance_of("keeper", "WETH")

        assert keeper.run_once() == []
        assert simulation.ledger.balance_of("keeper", "WETH") == balance

        clock.advance(60)
        assert len(keeper.run_once()) == 1

    def test_start_and_stop(self, simulation, settings):
        keeper = KeeperService(simulation, caller="keeper", deposit=ETHER, interval_seconds=3600, settings=settings)

        job_id = keeper.start()
        try:
            jobs = keeper.get_jobs()
            assert [job["id"] for job in jobs] == [job_id]
            assert jobs[0]["next_run"] is not None
        finally:
            keeper.stop()

        assert keeper.scheduler.running is False
