"""Tests for execution state persistence."""

import threading
import time

import pytest

from twoleg.arb.admin import Administrator
from twoleg.arb.engine import ArbEngine
from twoleg.domain.models import ArbitrageParameters, ExecutionState
from twoleg.services.persistence import MemoryStateStore, SQLStateStore
from twoleg.venues.simulated import FixedRateVenue

from conftest import BASE, CALLER, ENGINE, ETHER, TOKEN


class TestSQLStateStore:
    """Tests for SQLStateStore."""

    @pytest.fixture
    def store(self, tmp_path):
        return SQLStateStore(database_url=f"sqlite:///{tmp_path / 'state.db'}")

    def test_empty_store(self, store):
        assert store.load() is None

    def test_round_trip(self, store):
        store.save(ExecutionState(
            auto_trade_enabled=True,
            last_execution_time=1_700_000_000.5,
            paused=True,
        ))

        loaded = store.load()

        assert loaded.auto_trade_enabled is True
        assert loaded.last_execution_time == 1_700_000_000.5
        assert loaded.paused is True
        assert loaded.reentrancy_lock is False

    def test_single_row_updated_in_place(self, store):
        store.save(ExecutionState(last_execution_time=1.0))
        store.save(ExecutionState(last_execution_time=2.0))

        assert store.load().last_execution_time == 2.0

    def test_survives_reopen(self, store, tmp_path):
        """Test that a new store on the same file sees the saved row."""
        store.save(ExecutionState(paused=True))

        reopened = SQLStateStore(database_url=store.database_url)

        assert reopened.load().paused is True

    def test_creates_data_directory(self, tmp_path):
        url = f"sqlite:///{tmp_path / 'nested' / 'dir' / 'state.db'}"

        SQLStateStore(database_url=url)

        assert (tmp_path / "nested" / "dir").is_dir()


class TestEnginePersistence:
    """Engine state across restarts."""

    @pytest.fixture
    def store(self):
        return MemoryStateStore()

    def make_engine(self, ledger, registry, clock, store):
        return ArbEngine(
            ledger=ledger,
            registry=registry,
            params=ArbitrageParameters(),
            base_asset=BASE,
            account=ENGINE,
            clock=clock,
            state_store=store,
        )

    def test_execution_is_saved(self, ledger, registry, clock, store, venue_a, venue_b):
        engine = self.make_engine(ledger, registry, clock, store)

        engine.attempt_arbitrage(CALLER, venue_a, venue_b, TOKEN, ETHER)

        assert store.load().last_execution_time == clock()

    def test_cooldown_survives_restart(self, ledger, registry, clock, store, venue_a, venue_b):
        """Test that a restarted engine still honors the last execution time."""
        first = self.make_engine(ledger, registry, clock, store)
        first.attempt_arbitrage(CALLER, venue_a, venue_b, TOKEN, ETHER)

        clock.advance(10)
        second = self.make_engine(ledger, registry, clock, store)

        assert second.state.last_execution_time == first.state.last_execution_time
        assert second.state.cooldown_remaining(clock(), 60) == pytest.approx(50.0)

    def test_not_profitable_saves_nothing(self, ledger, registry, clock, store, venue_a):
        flat = FixedRateVenue("dex-b", ledger, BASE, clock=clock, rates={(TOKEN, BASE): (1, 100)})
        ledger.mint("dex-b", BASE, 100 * ETHER)
        engine = self.make_engine(ledger, registry, clock, store)

        engine.attempt_arbitrage(CALLER, venue_a, flat, TOKEN, ETHER)

        assert store.load() is None

    def test_pause_is_saved(self, ledger, registry, clock, store):
        engine = self.make_engine(ledger, registry, clock, store)
        Administrator(engine, owner="owner").pause("owner")

        restarted = self.make_engine(ledger, registry, clock, store)

        assert restarted.state.paused is True

    def test_concurrent_saves_keep_latest_state(self, ledger, registry, clock):
        """Test that a slow save cannot overwrite a newer admin change."""

        class SlowStore(MemoryStateStore):
            def __init__(self):
                super().__init__()
                self.entered = threading.Event()
                self.proceed = threading.Event()
                self.calls = 0

            def save(self, state):
                self.calls += 1
                if self.calls == 1:
                    self.entered.set()
                    self.proceed.wait(timeout=5)
                super().save(state)

        store = SlowStore()
        engine = self.make_engine(ledger, registry, clock, store)
        admin = Administrator(engine, owner="owner")

        first = threading.Thread(target=engine.persist_state)
        first.start()
        assert store.entered.wait(timeout=5)

        second = threading.Thread(target=admin.pause, args=("owner",))
        second.start()
        deadline = time.monotonic() + 5
        while not engine.state.paused and time.monotonic() < deadline:
            time.sleep(0.01)

        store.proceed.set()
        first.join(timeout=5)
        second.join(timeout=5)

        assert store.calls == 2
        assert store.load().paused is True
