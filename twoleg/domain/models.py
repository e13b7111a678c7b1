"""
Core data models for twoleg.

All models use dataclass and provide to_dict() for JSON serialization.
Amounts are ints in the smallest unit of their asset.
"""

from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, Optional

from twoleg.core.errors import ConfigurationError

# Scale of min_profit_margin_bps and leg1_slippage_tolerance_bps:
# 1000 == 100%, so 10 == 1%.
MARGIN_SCALE = 1000


class AttemptStatus(str, Enum):
    """How an arbitrage attempt ended (failures raise instead)."""
    EXECUTED = "executed"
    NOT_PROFITABLE = "not_profitable"


@dataclass
class AllowListEntry:
    """Approval flag for a venue or tradable asset."""
    address: str
    enabled: bool = False

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class ArbitrageParameters:
    """
    Process-wide arbitrage configuration.

    Mutated only by administration; read by the evaluator, guard and
    executor on every attempt.
    """
    min_profit_margin_bps: int = 10
    min_base_balance: int = 0
    cooldown_seconds: int = 60
    deadline_seconds: int = 300
    leg1_slippage_tolerance_bps: int = 50

    def __post_init__(self) -> None:
        for name, value in asdict(self).items():
            if not isinstance(value, int) or isinstance(value, bool):
                raise ValueError(f"{name} must be an int, got {value!r}")
            if value < 0:
                raise ValueError(f"{name} must be non-negative, got {value}")

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> "ArbitrageParameters":
        """
        Build from the `arbitrage` section of config.yaml.

        Unknown keys are ignored; missing keys take the defaults.
        """
        known = {f for f in cls.__dataclass_fields__}
        try:
            return cls(**{k: int(v) for k, v in config.items() if k in known})
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid arbitrage parameters: {e}") from e


@dataclass
class ExecutionState:
    """
    Snapshot of the engine's execution state.

    The live, lock-protected copy is twoleg.arb.state.EngineState; this
    model is what gets persisted and displayed.
    """
    auto_trade_enabled: bool = False
    last_execution_time: float = 0.0
    reentrancy_lock: bool = False
    paused: bool = False

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ExecutionState":
        return cls(**data)


@dataclass(frozen=True)
class TradeQuote:
    """Round-trip quote base -> asset (venue A) -> base (venue B)."""
    venue_a: str
    venue_b: str
    asset: str
    base_asset: str
    amount_in: int
    token_out: int
    round_trip_out: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ProfitVerdict:
    """Outcome of the profitability check."""
    profitable: bool
    profit: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class TradeResult:
    """Realized trade, emitted once after a committed execution."""
    asset: str
    base_in: int
    base_out: int
    profit: int
    venue_a: str = ""
    venue_b: str = ""
    caller: str = ""
    timestamp: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class AttemptOutcome:
    """Return value of ArbEngine.attempt_arbitrage."""
    status: AttemptStatus
    quote: TradeQuote
    verdict: ProfitVerdict
    result: Optional[TradeResult] = None
    refunded: int = 0
    payout: int = 0
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def executed(self) -> bool:
        return self.status == AttemptStatus.EXECUTED

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "quote": self.quote.to_dict(),
            "verdict": self.verdict.to_dict(),
            "result": self.result.to_dict() if self.result else None,
            "refunded": self.refunded,
            "payout": self.payout,
            "details": self.details,
        }
