"""
Unified exception definitions for twoleg.

All custom exceptions inherit from TwolegError for easy catching.
Everything that aborts an arbitrage attempt inherits from ArbitrageError;
the engine rolls the attempt back in full before re-raising it.
"""

from typing import Any, Optional


class TwolegError(Exception):
    """Base exception for all twoleg errors."""

    def __init__(
        self,
        message: str,
        *,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or "TWOLEG_ERROR"
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for logging/serialization."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class ConfigurationError(TwolegError):
    """Configuration-related errors."""

    def __init__(self, message: str, **kwargs):
        super().__init__(message, code="CONFIG_ERROR", **kwargs)


class NotAuthorizedError(TwolegError):
    """Administrative call made by someone other than the owner."""

    def __init__(self, message: str, *, caller: str, **kwargs):
        details = kwargs.pop("details", {})
        details["caller"] = caller
        super().__init__(message, code="NOT_AUTHORIZED", details=details, **kwargs)
        self.caller = caller


class ArbitrageError(TwolegError):
    """Fatal to the current arbitrage attempt."""

    default_code = "ARBITRAGE_ERROR"

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("code", self.default_code)
        super().__init__(message, **kwargs)


# ==============================================
# Allow-list / quoting
# ==============================================

class UnapprovedParticipantError(ArbitrageError):
    """A venue or asset taking part in the trade is not allow-listed."""

    default_code = "UNAPPROVED_PARTICIPANT"

    def __init__(self, message: str, *, participant: str, **kwargs):
        details = kwargs.pop("details", {})
        details["participant"] = participant
        super().__init__(message, details=details, **kwargs)
        self.participant = participant


class VenueUnapprovedError(UnapprovedParticipantError):
    """Venue is not in the allow-list."""

    default_code = "VENUE_UNAPPROVED"

    def __init__(self, venue: str, **kwargs):
        super().__init__(f"Venue not approved: {venue}", participant=venue, **kwargs)
        self.venue = venue


class AssetUnapprovedError(UnapprovedParticipantError):
    """Asset is not in the allow-list."""

    default_code = "ASSET_UNAPPROVED"

    def __init__(self, asset: str, **kwargs):
        super().__init__(f"Asset not approved: {asset}", participant=asset, **kwargs)
        self.asset = asset


class QuoteUnavailableError(ArbitrageError):
    """A venue could not (or would not sensibly) quote the requested path."""

    default_code = "QUOTE_UNAVAILABLE"

    def __init__(
        self,
        message: str,
        *,
        venue: str,
        cause: Optional[Exception] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        details["venue"] = venue
        if cause:
            details["cause"] = str(cause)
        super().__init__(message, details=details, **kwargs)
        self.venue = venue
        self.cause = cause


# ==============================================
# Admission
# ==============================================

class ExecutionPausedError(ArbitrageError):
    """Execution is paused by administration."""

    default_code = "EXECUTION_PAUSED"

    def __init__(self, message: str = "Arbitrage execution is paused", **kwargs):
        super().__init__(message, **kwargs)


class ReentrantCallError(ArbitrageError):
    """Another execution already holds the reentrancy lock."""

    default_code = "REENTRANT_CALL"

    def __init__(self, message: str = "An arbitrage execution is already in flight", **kwargs):
        super().__init__(message, **kwargs)


class InsufficientReserveError(ArbitrageError):
    """Base balance does not clear the configured floor."""

    default_code = "INSUFFICIENT_RESERVE"

    def __init__(self, message: str, *, balance: int, required: int, **kwargs):
        details = kwargs.pop("details", {})
        details["balance"] = balance
        details["required"] = required
        super().__init__(message, details=details, **kwargs)
        self.balance = balance
        self.required = required


class InsufficientDepositError(InsufficientReserveError):
    """Caller deposit is below the minimum base balance."""

    default_code = "INSUFFICIENT_DEPOSIT"


class CooldownActiveError(ArbitrageError):
    """Previous execution is too recent."""

    default_code = "COOLDOWN_ACTIVE"

    def __init__(self, remaining: float, **kwargs):
        details = kwargs.pop("details", {})
        details["remaining_seconds"] = remaining
        super().__init__(
            f"Cooldown active, {remaining:.1f}s remaining",
            details=details,
            **kwargs,
        )
        self.remaining = remaining


# ==============================================
# Swaps
# ==============================================

class SwapSlippageExceededError(ArbitrageError):
    """Swap output below its floor (or the venue failed to fill)."""

    default_code = "SWAP_SLIPPAGE_EXCEEDED"

    def __init__(
        self,
        message: str,
        *,
        amount_out: Optional[int] = None,
        amount_out_min: Optional[int] = None,
        leg: Optional[int] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        details["amount_out"] = amount_out
        details["amount_out_min"] = amount_out_min
        details["leg"] = leg
        super().__init__(message, details=details, **kwargs)
        self.amount_out = amount_out
        self.amount_out_min = amount_out_min
        self.leg = leg


class SwapDeadlineExceededError(ArbitrageError):
    """Swap submitted after its deadline."""

    default_code = "SWAP_DEADLINE_EXCEEDED"

    def __init__(self, *, deadline: float, now: float, **kwargs):
        details = kwargs.pop("details", {})
        details["deadline"] = deadline
        details["now"] = now
        super().__init__(
            f"Swap deadline {deadline:.0f} exceeded at {now:.0f}",
            details=details,
            **kwargs,
        )
        self.deadline = deadline
        self.now = now


# ==============================================
# Settlement
# ==============================================

class NoProfitRealizedError(ArbitrageError):
    """Round trip finished without any gain."""

    default_code = "NO_PROFIT_REALIZED"

    def __init__(self, *, balance_before: int, balance_after: int, **kwargs):
        details = kwargs.pop("details", {})
        details["balance_before"] = balance_before
        details["balance_after"] = balance_after
        super().__init__(
            f"No profit realized ({balance_before} -> {balance_after})",
            details=details,
            **kwargs,
        )


class ProfitBelowMinimumError(ArbitrageError):
    """Realized profit is positive but under the required minimum."""

    default_code = "PROFIT_BELOW_MINIMUM"

    def __init__(self, *, profit: int, required: int, **kwargs):
        details = kwargs.pop("details", {})
        details["profit"] = profit
        details["required"] = required
        super().__init__(
            f"Profit {profit} below required minimum {required}",
            details=details,
            **kwargs,
        )
        self.profit = profit
        self.required = required


class FundTransferFailedError(ArbitrageError):
    """Ledger transfer could not be applied."""

    default_code = "FUND_TRANSFER_FAILED"

    def __init__(
        self,
        message: str,
        *,
        sender: str,
        recipient: str,
        asset: str,
        amount: int,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        details.update(sender=sender, recipient=recipient, asset=asset, amount=amount)
        super().__init__(message, details=details, **kwargs)
