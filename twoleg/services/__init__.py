"""
Services module - Cross-cutting capabilities

Contains:
- Execution state persistence (persistence)
- Paper-trading wiring (simulation)
- Keeper scheduling (keeper)

Only persistence is re-exported here; simulation and keeper sit on top of
the engine and are imported from their modules.
"""

from twoleg.services.persistence import (
    StateStore,
    MemoryStateStore,
    SQLStateStore,
    create_state_store,
)

__all__ = [
    "StateStore",
    "MemoryStateStore",
    "SQLStateStore",
    "create_state_store",
]
