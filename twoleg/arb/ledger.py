"""
Balance ledger.

Single source of truth for who holds what: the engine account, callers,
the owner and every ledger-backed venue's reserves. The ledger is the
transactional substrate of the execution boundary.

Rollback is journaled, not wholesale: while a boundary is open, every
balance change made on the boundary's thread is recorded as a delta, and
restore() applies the inverse deltas. Changes made concurrently by other
threads (other holders' transfers, mints, direct venue swaps) are never
touched by a rollback.
"""

import threading

from twoleg.core.errors import FundTransferFailedError
from twoleg.core.logging import LoggerMixin

BalanceKey = tuple[str, str]  # (holder, asset)


class Journal:
    """Balance deltas recorded by one thread inside an open boundary."""

    def __init__(self, owner: int):
        self.owner = owner
        self.entries: list[tuple[BalanceKey, int]] = []

    def __len__(self) -> int:
        return len(self.entries)


class Ledger(LoggerMixin):
    """Thread-safe balances keyed by (holder, asset)."""

    def __init__(self):
        self._balances: dict[BalanceKey, int] = {}
        self._lock = threading.RLock()
        # thread id -> open journals, innermost last
        self._journals: dict[int, list[Journal]] = {}

    def balance_of(self, holder: str, asset: str) -> int:
        with self._lock:
            return self._balances.get((holder, asset), 0)

    def balances(self) -> dict[BalanceKey, int]:
        """Copy of every non-zero balance."""
        with self._lock:
            return {key: amount for key, amount in self._balances.items() if amount}

    def mint(self, holder: str, asset: str, amount: int) -> None:
        """Credit funds from outside the system (setup, deposits from a bridge)."""
        if amount < 0:
            raise ValueError(f"Cannot mint negative amount: {amount}")
        with self._lock:
            self._apply((holder, asset), amount)

    def transfer(self, sender: str, recipient: str, asset: str, amount: int) -> None:
        """
        Move funds between holders.

        Raises:
            FundTransferFailedError: Negative amount or insufficient balance.
        """
        if not isinstance(amount, int) or amount < 0:
            raise FundTransferFailedError(
                f"Invalid transfer amount: {amount!r}",
                sender=sender, recipient=recipient, asset=asset, amount=amount,
            )

        with self._lock:
            available = self._balances.get((sender, asset), 0)
            if available < amount:
                raise FundTransferFailedError(
                    f"{sender} holds {available} {asset}, cannot send {amount}",
                    sender=sender, recipient=recipient, asset=asset, amount=amount,
                )
            if amount == 0 or sender == recipient:
                return
            self._apply((sender, asset), -amount)
            self._apply((recipient, asset), amount)

        self.logger.debug(f"Transfer {amount} {asset}: {sender} -> {recipient}")

    def holdings(self, holder: str) -> dict[str, int]:
        """Non-zero balances of one holder by asset."""
        with self._lock:
            return {
                asset: amount
                for (who, asset), amount in self._balances.items()
                if who == holder and amount
            }

    def _apply(self, key: BalanceKey, delta: int) -> None:
        """Change one balance and journal it. Caller holds the lock."""
        self._balances[key] = self._balances.get(key, 0) + delta
        for journal in self._journals.get(threading.get_ident(), ()):
            journal.entries.append((key, delta))

    # ==============================================
    # Transactional participant
    # ==============================================

    def snapshot(self) -> Journal:
        """Open a journal for the calling thread."""
        journal = Journal(threading.get_ident())
        with self._lock:
            self._journals.setdefault(journal.owner, []).append(journal)
        return journal

    def commit(self, journal: Journal) -> None:
        """Close the journal and keep its changes."""
        with self._lock:
            self._close(journal)

    def restore(self, journal: Journal) -> None:
        """Close the journal and undo exactly the changes it recorded."""
        with self._lock:
            self._close(journal)
            for key, delta in reversed(journal.entries):
                self._apply(key, -delta)
                if self._balances[key] < 0:
                    self.logger.error(
                        f"Rollback left {key[0]} with {self._balances[key]} {key[1]}"
                    )
        self.logger.debug(f"Reverted {len(journal)} balance changes")

    def _close(self, journal: Journal) -> None:
        stack = self._journals.get(journal.owner, [])
        if journal in stack:
            stack.remove(journal)
        if not stack:
            self._journals.pop(journal.owner, None)
