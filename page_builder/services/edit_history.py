"""
Edit History

Bounded undo/redo stacks with edit batching, as an explicit state machine:

    { undo: [HistoryEntry], redo: [HistoryEntry], pending_batch: PendingBatch | None }

Batching: a batchable edit whose kind and target match the pending batch,
arriving before the batch expires, extends the batch instead of pushing a
new entry. The entry already on the undo stack holds the state from before
the first edit of the batch. Each extension slides the expiry forward.
"""

import logging
from dataclasses import dataclass
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

StateT = TypeVar("StateT")


@dataclass(frozen=True)
class HistoryEntry(Generic[StateT]):
    """A state snapshot plus the action kind that moved away from it."""

    state: StateT
    label: str


@dataclass(frozen=True)
class PendingBatch:
    """The open batch: which kind of edit, against which target, until when."""

    kind: str
    target_id: str
    expires_at: float


class EditHistory(Generic[StateT]):
    """Undo/redo stacks for immutable state snapshots."""

    def __init__(self, limit: int = 80, batch_window: float = 0.8):
        """
        Args:
            limit: Maximum undo entries (oldest evicted first)
            batch_window: Seconds a batch stays open after its last edit
        """
        self.limit = max(1, limit)
        self.batch_window = batch_window
        self.undo_stack: list[HistoryEntry[StateT]] = []
        self.redo_stack: list[HistoryEntry[StateT]] = []
        self.pending_batch: PendingBatch | None = None

    @property
    def can_undo(self) -> bool:
        return bool(self.undo_stack)

    @property
    def can_redo(self) -> bool:
        return bool(self.redo_stack)

    @property
    def size(self) -> int:
        return len(self.undo_stack)

    def _continues_batch(self, kind: str, target_id: str | None, now: float) -> bool:
        batch = self.pending_batch
        return (
            batch is not None
            and target_id is not None
            and batch.kind == kind
            and batch.target_id == target_id
            and now < batch.expires_at
        )

    def record(
        self,
        previous: StateT,
        kind: str,
        now: float,
        *,
        target_id: str | None = None,
        batchable: bool = False,
    ) -> bool:
        """
        Record that the state is about to move away from `previous`.

        Args:
            previous: State before the edit
            kind: Action kind (used as entry label and batch key)
            now: Current time in seconds (monotonic clock)
            target_id: Edited target, for batching
            batchable: Whether this kind of edit may coalesce

        Returns:
            True if the edit joined the pending batch (no new entry)
        """
        self.redo_stack.clear()

        if batchable and self._continues_batch(kind, target_id, now):
            self.pending_batch = PendingBatch(kind, target_id, now + self.batch_window)  # type: ignore[arg-type]
            return True

        self.undo_stack.append(HistoryEntry(state=previous, label=kind))
        if len(self.undo_stack) > self.limit:
            evicted = len(self.undo_stack) - self.limit
            del self.undo_stack[:evicted]
            logger.debug(f"Evicted {evicted} oldest history entr{'y' if evicted == 1 else 'ies'}")

        if batchable and target_id is not None:
            self.pending_batch = PendingBatch(kind, target_id, now + self.batch_window)
        else:
            self.pending_batch = None
        return False

    def close_batch(self) -> None:
        """End the pending batch so the next edit starts a new entry."""
        self.pending_batch = None

    def interrupt_batch(self, kind: str, target_id: str | None) -> None:
        """Close the pending batch unless it belongs to this kind and target."""
        batch = self.pending_batch
        if batch is None:
            return
        if target_id is None or batch.kind != kind or batch.target_id != target_id:
            self.pending_batch = None

    def undo(self, current: StateT) -> StateT | None:
        """Pop the latest entry, pushing `current` onto redo. None if empty."""
        if not self.undo_stack:
            return None
        entry = self.undo_stack.pop()
        self.redo_stack.append(HistoryEntry(state=current, label=entry.label))
        self.pending_batch = None
        return entry.state

    def redo(self, current: StateT) -> StateT | None:
        """Mirror of undo(). None if nothing to redo."""
        if not self.redo_stack:
            return None
        entry = self.redo_stack.pop()
        self.undo_stack.append(HistoryEntry(state=current, label=entry.label))
        self.pending_batch = None
        return entry.state

    def clear(self) -> None:
        self.undo_stack.clear()
        self.redo_stack.clear()
        self.pending_batch = None
