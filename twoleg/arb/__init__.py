"""
twoleg Arbitrage Module.

Two-leg round-trip arbitrage between two venues.

Components:
- quote: Round-trip quotes across venue A and venue B
- profitability: Margin check on a round trip
- guard: Pause / reentrancy / reserve / allow-list / cooldown admission
- executor: The two effectful swap legs
- settlement: Profit verification and payout
- boundary: Rollback-on-error scope around an attempt
- engine: attempt_arbitrage pipeline
- admin: Owner-only administration and recovery
"""

from twoleg.arb.ledger import Ledger
from twoleg.arb.registry import AllowListRegistry
from twoleg.arb.quote import QuoteEngine
from twoleg.arb.profitability import ProfitabilityEvaluator
from twoleg.arb.guard import ExecutionGuard
from twoleg.arb.executor import SwapExecutor
from twoleg.arb.settlement import Settlement
from twoleg.arb.boundary import ExecutionBoundary
from twoleg.arb.engine import ArbEngine
from twoleg.arb.admin import Administrator

__all__ = [
    "Ledger",
    "AllowListRegistry",
    "QuoteEngine",
    "ProfitabilityEvaluator",
    "ExecutionGuard",
    "SwapExecutor",
    "Settlement",
    "ExecutionBoundary",
    "ArbEngine",
    "Administrator",
]
