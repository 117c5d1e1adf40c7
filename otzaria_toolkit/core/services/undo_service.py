from __future__ import annotations

"""Undo snapshot management for :class:`DocumentStore`.

This service is UI-agnostic and performs pure in-memory history tracking of
the whole document store.

Design principles
-----------------
- No UI imports and no I/O (filesystem/console).
- Snapshots are immutable once stored: a snapshot holds a tuple of frozen
  :class:`Document` values, so later edits of the live store cannot reach it.
- Callers push a snapshot of the state *before* a mutation; undo restores it.
- Single-step undo only, no redo.
- Memory usage controlled by a capacity policy (oldest snapshot dropped).
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple

from otzaria_toolkit.core.models import Document, DocumentStore

__all__ = ["UndoService"]


@dataclass(frozen=True)
class _Snapshot:
    """Immutable copy of the store contents.

    Attributes
    ----------
    documents :
        The store's documents at capture time.
    label :
        Name of the operation that was about to run, for diagnostics.
    """

    documents: Tuple[Document, ...]
    label: str = ""


class UndoService:
    """Bounded LIFO of store snapshots.

    Parameters
    ----------
    max_history : int, default=20
        Maximum number of snapshots to keep. Pushing beyond capacity evicts
        the oldest one. Values lower than 1 are coerced to 1.

    Examples
    --------
    >>> store = DocumentStore()
    >>> svc = UndoService(max_history=10)
    >>> svc.push_snapshot(store, "merge")   # before mutating store
    >>> changed = svc.undo(store)           # restores the pre-merge state
    """

    def __init__(self, max_history: int = 20) -> None:
        self._max_history: int = max(1, int(max_history))
        self._undo_stack: List[_Snapshot] = []

    # --------------------------------------------------------------------- API

    def push_snapshot(self, store: DocumentStore, label: str = "") -> None:
        """Capture the current store contents and push them onto the stack."""
        self._undo_stack.append(_Snapshot(documents=tuple(store.documents), label=label))
        overflow = len(self._undo_stack) - self._max_history
        if overflow > 0:
            del self._undo_stack[0:overflow]

    def undo(self, store: DocumentStore) -> bool:
        """Restore the most recent snapshot into *store*.

        Returns False (and leaves *store* alone) when there is nothing to undo.
        """
        if not self._undo_stack:
            return False
        snap = self._undo_stack.pop()
        store.replace_all(snap.documents)
        return True

    def can_undo(self) -> bool:
        """Return True if an undo operation is currently possible."""
        return bool(self._undo_stack)

    def peek_label(self) -> Optional[str]:
        """Label of the snapshot :meth:`undo` would restore, if any."""
        return self._undo_stack[-1].label if self._undo_stack else None

    def __len__(self) -> int:
        return len(self._undo_stack)
