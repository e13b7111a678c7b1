"""
Execution state persistence.

Stores the single ExecutionState row (cooldown timestamp and admin flags)
so a restarted engine keeps honoring the cooldown. Trade history is not
stored.

Supports:
- SQLite / any SQLAlchemy URL (SQLStateStore)
- In-memory (MemoryStateStore, tests and dry runs)
"""

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from sqlalchemy import Boolean, Column, DateTime, Float, Integer, create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from twoleg.core.config import Settings, get_settings
from twoleg.core.logging import get_logger
from twoleg.domain.models import ExecutionState

logger = get_logger("persistence")

Base = declarative_base()

STATE_ROW_ID = 1


class ExecutionStateRow(Base):
    """Database model for the engine's execution state."""

    __tablename__ = "execution_state"

    id = Column(Integer, primary_key=True)
    last_execution_time = Column(Float, nullable=False, default=0.0)
    paused = Column(Boolean, nullable=False, default=False)
    auto_trade_enabled = Column(Boolean, nullable=False, default=False)
    updated_at = Column(DateTime, nullable=False)


class StateStore(ABC):
    """Abstract base class for execution state stores."""

    @abstractmethod
    def save(self, state: ExecutionState) -> None:
        """Persist the state (the reentrancy lock is never persisted)."""
        pass

    @abstractmethod
    def load(self) -> Optional[ExecutionState]:
        """Load the saved state, None if nothing was saved yet."""
        pass


class MemoryStateStore(StateStore):
    """Keeps the last saved state in memory."""

    def __init__(self):
        self._state: Optional[ExecutionState] = None

    def save(self, state: ExecutionState) -> None:
        self._state = ExecutionState(
            auto_trade_enabled=state.auto_trade_enabled,
            last_execution_time=state.last_execution_time,
            paused=state.paused,
        )

    def load(self) -> Optional[ExecutionState]:
        return self._state


class SQLStateStore(StateStore):
    """
    SQLAlchemy-backed state store.

    Keeps exactly one row, updated in place.
    """

    def __init__(
        self,
        database_url: Optional[str] = None,
        settings: Optional[Settings] = None,
    ):
        settings = settings or get_settings()
        self.database_url = database_url or settings.database_url

        # Ensure data directory exists
        if self.database_url.startswith("sqlite:///") and self.database_url != "sqlite:///:memory:":
            db_path = Path(self.database_url.replace("sqlite:///", ""))
            db_path.parent.mkdir(parents=True, exist_ok=True)

        self.engine = create_engine(self.database_url)
        Base.metadata.create_all(self.engine)
        self.Session = sessionmaker(bind=self.engine)

        logger.info(f"Initialized state store: {self.database_url}")

    def save(self, state: ExecutionState) -> None:
        session = self.Session()
        try:
            row = session.get(ExecutionStateRow, STATE_ROW_ID)
            if row is None:
                row = ExecutionStateRow(id=STATE_ROW_ID)
                session.add(row)

            row.last_execution_time = state.last_execution_time
            row.paused = state.paused
            row.auto_trade_enabled = state.auto_trade_enabled
            row.updated_at = datetime.now(timezone.utc).replace(tzinfo=None)

            session.commit()
            logger.debug(f"Saved execution state: {state.to_dict()}")

        except Exception as e:
            session.rollback()
            logger.error(f"Failed to save execution state: {e}")
            raise
        finally:
            session.close()

    def load(self) -> Optional[ExecutionState]:
        session = self.Session()
        try:
            row = session.get(ExecutionStateRow, STATE_ROW_ID)
            if row is None:
                return None
            return ExecutionState(
                auto_trade_enabled=row.auto_trade_enabled,
                last_execution_time=row.last_execution_time,
                paused=row.paused,
            )
        finally:
            session.close()


def create_state_store(settings: Optional[Settings] = None) -> StateStore:
    """Create the state store configured by DATABASE_URL."""
    settings = settings or get_settings()
    return SQLStateStore(settings=settings)
