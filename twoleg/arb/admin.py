"""
Owner-only administration of an ArbEngine.

Parameter setters, allow-list toggles, pause switch and emergency recovery
sweeps. Every call names its caller; anyone but the owner is refused.
"""

from dataclasses import replace
from typing import Optional

from twoleg.arb.engine import ArbEngine
from twoleg.core.errors import ConfigurationError, NotAuthorizedError, ReentrantCallError
from twoleg.core.logging import LoggerMixin
from twoleg.domain.models import ArbitrageParameters


class Administrator(LoggerMixin):
    """Administration interface consumed by the engine."""

    def __init__(self, engine: ArbEngine, owner: str):
        self.engine = engine
        self.owner = owner

    def _require_owner(self, caller: str) -> None:
        if caller != self.owner:
            self.logger.warning(f"Rejected admin call from {caller}")
            raise NotAuthorizedError(f"{caller} is not the owner", caller=caller)

    def _update_params(self, caller: str, **changes) -> ArbitrageParameters:
        self._require_owner(caller)
        try:
            params = replace(self.engine.params, **changes)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid parameter change {changes}: {e}") from e
        # Whole-object swap: readers see either the old or the new parameters
        self.engine.params = params
        self.logger.info(f"Parameters updated: {changes}")
        return params

    # ==============================================
    # Parameters
    # ==============================================

    def set_min_profit_margin(self, caller: str, margin_bps: int) -> ArbitrageParameters:
        """Margin in tenths of a percent (10 == 1%)."""
        return self._update_params(caller, min_profit_margin_bps=margin_bps)

    def set_min_base_balance(self, caller: str, amount: int) -> ArbitrageParameters:
        return self._update_params(caller, min_base_balance=amount)

    def set_cooldown(self, caller: str, seconds: int) -> ArbitrageParameters:
        return self._update_params(caller, cooldown_seconds=seconds)

    def set_leg1_slippage_tolerance(self, caller: str, tolerance_bps: int) -> ArbitrageParameters:
        return self._update_params(caller, leg1_slippage_tolerance_bps=tolerance_bps)

    # ==============================================
    # Flags
    # ==============================================

    def set_auto_trade_enabled(self, caller: str, enabled: bool) -> None:
        self._require_owner(caller)
        self.engine.state.set_auto_trade_enabled(enabled)
        self.engine.persist_state()
        self.logger.info(f"Auto trade {'enabled' if enabled else 'disabled'}")

    def pause(self, caller: str) -> None:
        self._require_owner(caller)
        self.engine.state.set_paused(True)
        self.engine.persist_state()
        self.logger.warning("Arbitrage execution paused")

    def unpause(self, caller: str) -> None:
        self._require_owner(caller)
        self.engine.state.set_paused(False)
        self.engine.persist_state()
        self.logger.info("Arbitrage execution unpaused")

    # ==============================================
    # Allow-list
    # ==============================================

    def set_venue_approval(self, caller: str, venue: str, enabled: bool) -> None:
        self._require_owner(caller)
        self.engine.registry.set_venue_approval(venue, enabled)

    def set_token_approval(self, caller: str, asset: str, enabled: bool) -> None:
        self._require_owner(caller)
        self.engine.registry.set_token_approval(asset, enabled)

    # ==============================================
    # Recovery
    # ==============================================

    def recover_native(self, caller: str, amount: Optional[int] = None) -> int:
        """Sweep base asset from the engine account to the owner."""
        return self.recover_token(caller, self.engine.base_asset, amount)

    def recover_token(self, caller: str, asset: str, amount: Optional[int] = None) -> int:
        """
        Sweep an asset from the engine account to the owner.

        Args:
            caller: Must be the owner
            asset: Asset to sweep
            amount: Units to sweep, whole balance if None

        Returns:
            Amount swept

        Raises:
            ReentrantCallError: An execution is in flight.
            FundTransferFailedError: amount exceeds the balance.
        """
        self._require_owner(caller)

        state = self.engine.state
        if not state.try_acquire():
            raise ReentrantCallError("Cannot sweep funds while an execution is in flight")
        try:
            ledger = self.engine.ledger
            if amount is None:
                amount = ledger.balance_of(self.engine.account, asset)
            ledger.transfer(self.engine.account, self.owner, asset, amount)
        finally:
            state.release()

        self.logger.warning(f"Recovered {amount} {asset} to {self.owner}")
        return amount
