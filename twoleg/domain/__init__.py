"""
Domain module - Business models

Contains pure data models without external dependencies.
All models are JSON-serializable via to_dict().
"""

from twoleg.domain.models import (
    MARGIN_SCALE,
    AttemptStatus,
    AllowListEntry,
    ArbitrageParameters,
    ExecutionState,
    TradeQuote,
    ProfitVerdict,
    TradeResult,
    AttemptOutcome,
)

__all__ = [
    "MARGIN_SCALE",
    "AttemptStatus",
    "AllowListEntry",
    "ArbitrageParameters",
    "ExecutionState",
    "TradeQuote",
    "ProfitVerdict",
    "TradeResult",
    "AttemptOutcome",
]
