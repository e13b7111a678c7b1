"""
Venues module - liquidity venue connectors

Contains the connector interface the engine trades through and the
ledger-backed simulated venues used for paper trading.
"""

from twoleg.venues.base import VenueConnector, VenueStatus, HealthCheckResult
from twoleg.venues.simulated import (
    SimulatedVenue,
    ConstantProductVenue,
    FixedRateVenue,
    create_venue,
)

__all__ = [
    "VenueConnector",
    "VenueStatus",
    "HealthCheckResult",
    "SimulatedVenue",
    "ConstantProductVenue",
    "FixedRateVenue",
    "create_venue",
]
