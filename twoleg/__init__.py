"""twoleg - two-leg round-trip arbitrage engine."""

__version__ = "0.1.0"
