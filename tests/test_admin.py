"""Tests for owner-only administration."""

import pytest

from twoleg.core.errors import (
    ConfigurationError,
    FundTransferFailedError,
    NotAuthorizedError,
    ReentrantCallError,
)

from conftest import BASE, CALLER, ENGINE, ETHER, OWNER, TOKEN


class TestAuthorization:
    """Every administrative call checks the caller."""

    @pytest.mark.parametrize(
        "call",
        [
            lambda admin: admin.set_min_profit_margin(CALLER, 5),
            lambda admin: admin.set_min_base_balance(CALLER, 1),
            lambda admin: admin.set_cooldown(CALLER, 0),
            lambda admin: admin.set_leg1_slippage_tolerance(CALLER, 10),
            lambda admin: admin.set_auto_trade_enabled(CALLER, True),
            lambda admin: admin.pause(CALLER),
            lambda admin: admin.unpause(CALLER),
            lambda admin: admin.set_venue_approval(CALLER, "dex-x", True),
            lambda admin: admin.set_token_approval(CALLER, "XYZ", True),
            lambda admin: admin.recover_native(CALLER),
            lambda admin: admin.recover_token(CALLER, TOKEN),
        ],
    )
    def test_non_owner_refused(self, admin, call):
        with pytest.raises(NotAuthorizedError) as exc:
            call(admin)

        assert exc.value.caller == CALLER

    def test_refused_call_changes_nothing(self, admin, engine):
        params = engine.params

        with pytest.raises(NotAuthorizedError):
            admin.set_min_profit_margin(CALLER, 0)

        assert engine.params is params


class TestParameters:
    """Tests for parameter setters."""

    def test_set_margin(self, admin, engine):
        admin.set_min_profit_margin(OWNER, 25)

        assert engine.params.min_profit_margin_bps == 25
        assert engine.evaluator.min_profit_margin_bps == 25

    def test_other_fields_untouched(self, admin, engine):
        admin.set_cooldown(OWNER, 5)

        assert engine.params.cooldown_seconds == 5
        assert engine.params.min_profit_margin_bps == 10

    @pytest.mark.parametrize("value", [-1, "10", 1.5])
    def test_invalid_value(self, admin, engine, value):
        """Test that invalid values raise ConfigurationError and keep the old params."""
        params = engine.params

        with pytest.raises(ConfigurationError):
            admin.set_min_profit_margin(OWNER, value)

        assert engine.params is params

    def test_margin_applies_to_next_attempt(self, admin, engine, venue_a, venue_b):
        """Test that raising the margin above 2% stops the 2% round trip."""
        admin.set_min_profit_margin(OWNER, 30)

        outcome = engine.attempt_arbitrage(CALLER, venue_a, venue_b, TOKEN, ETHER)

        assert not outcome.executed

    def test_zero_cooldown(self, admin, engine, venue_a, venue_b):
        admin.set_cooldown(OWNER, 0)

        assert engine.attempt_arbitrage(CALLER, venue_a, venue_b, TOKEN, ETHER).executed
        assert engine.attempt_arbitrage(CALLER, venue_a, venue_b, TOKEN, ETHER).executed


class TestFlags:
    """Tests for pause and auto trade."""

    def test_pause_unpause(self, admin, engine):
        admin.pause(OWNER)
        assert engine.state.paused is True

        admin.unpause(OWNER)
        assert engine.state.paused is False

    def test_auto_trade(self, admin, engine):
        admin.set_auto_trade_enabled(OWNER, True)

        assert engine.state.auto_trade_enabled is True

    def test_allow_list(self, admin, registry):
        admin.set_venue_approval(OWNER, "dex-a", False)
        admin.set_token_approval(OWNER, "XYZ", True)

        assert registry.is_venue_approved("dex-a") is False
        assert registry.is_asset_approved("XYZ") is True


class TestRecovery:
    """Tests for emergency sweeps."""

    def test_recover_native_sweeps_all(self, admin, ledger):
        ledger.mint(ENGINE, BASE, 3 * ETHER)

        swept = admin.recover_native(OWNER)

        assert swept == 3 * ETHER
        assert ledger.balance_of(OWNER, BASE) == 3 * ETHER
        assert ledger.balance_of(ENGINE, BASE) == 0

    def test_recover_token_partial(self, admin, ledger):
        ledger.mint(ENGINE, TOKEN, 50)

        assert admin.recover_token(OWNER, TOKEN, 20) == 20
        assert ledger.balance_of(ENGINE, TOKEN) == 30
        assert ledger.balance_of(OWNER, TOKEN) == 20

    def test_recover_more_than_held(self, admin, ledger):
        ledger.mint(ENGINE, TOKEN, 5)

        with pytest.raises(FundTransferFailedError):
            admin.recover_token(OWNER, TOKEN, 6)

        assert ledger.balance_of(ENGINE, TOKEN) == 5

    def test_recover_while_locked(self, admin, engine, ledger):
        """Test that a sweep during an execution is refused."""
        ledger.mint(ENGINE, BASE, ETHER)
        assert engine.state.try_acquire()
        try:
            with pytest.raises(ReentrantCallError):
                admin.recover_native(OWNER)
        finally:
            engine.state.release()

        assert ledger.balance_of(ENGINE, BASE) == ETHER
        assert engine.state.locked is False
