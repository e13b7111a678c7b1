"""
Atomic execution boundary.

Wraps one arbitrage attempt as a single unit of work: every participant is
snapshotted on entry and restored if anything inside raises, so a failed
leg 2 also undoes leg 1, the deposit and any state change.

Participants implement the Transactional protocol: snapshot() opens a
checkpoint, restore() undoes the changes made since, commit() keeps them.
Connectors to venues whose effects live outside the ledger must implement
it too (typically by recording and replaying a compensating swap),
otherwise the boundary cannot undo their side of a failed attempt.
"""

from contextlib import contextmanager
from typing import Any, Iterator, Protocol, runtime_checkable

from twoleg.core.logging import LoggerMixin


@runtime_checkable
class Transactional(Protocol):
    """Something the boundary can checkpoint and roll back."""

    def snapshot(self) -> Any: ...

    def restore(self, snapshot: Any) -> None: ...

    def commit(self, snapshot: Any) -> None: ...


class ExecutionBoundary(LoggerMixin):
    """Rollback-on-error scope over a fixed set of participants."""

    def __init__(self, *participants: Transactional):
        for p in participants:
            if not isinstance(p, Transactional):
                raise TypeError(f"{type(p).__name__} cannot take part in an atomic execution")
        self.participants = list(participants)

    def add(self, participant: Transactional) -> None:
        if not isinstance(participant, Transactional):
            raise TypeError(f"{type(participant).__name__} cannot take part in an atomic execution")
        if participant not in self.participants:
            self.participants.append(participant)

    @contextmanager
    def atomic(self) -> Iterator[None]:
        """
        Run the body as one unit of work.

        On any exception every participant undoes what the body did, in
        reverse order, and the exception propagates unchanged. On success
        every checkpoint is committed.
        """
        checkpoints = [(p, p.snapshot()) for p in self.participants]
        try:
            yield
        except BaseException as e:
            for participant, snap in reversed(checkpoints):
                participant.restore(snap)
            self.logger.info(
                f"Rolled back {len(checkpoints)} participants after {type(e).__name__}"
            )
            raise
        else:
            for participant, snap in checkpoints:
                participant.commit(snap)
