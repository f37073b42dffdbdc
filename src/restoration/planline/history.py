"""
Bounded undo/redo history of plan-line states.
"""

from collections import deque
from dataclasses import dataclass
from typing import Any, List, Optional

from restoration.errors import InvalidInput


@dataclass(frozen=True)
class HistoryEntry:
    label: str
    state: Any


class EditHistory:
    """
    Two stacks of immutable states. ``push`` records the state before an
    edit and clears the redo stack; the oldest entry is dropped beyond ``limit``.
    """

    def __init__(self, limit: int = 100):
        if limit < 1:
            raise InvalidInput("history limit must be at least 1", "limit", limit)
        self.limit = limit
        self._undo = deque(maxlen=limit)
        self._redo = deque(maxlen=limit)

    def push(self, state, label: str = "edit") -> None:
        self._undo.append(HistoryEntry(label, state))
        self._redo.clear()

    def undo(self, current, label: Optional[str] = None):
        """Return the previous state (None when there is nothing to undo)."""
        if not self._undo:
            return None
        entry = self._undo.pop()
        self._redo.append(HistoryEntry(label or entry.label, current))
        return entry.state

    def redo(self, current, label: Optional[str] = None):
        if not self._redo:
            return None
        entry = self._redo.pop()
        self._undo.append(HistoryEntry(label or entry.label, current))
        return entry.state

    @property
    def can_undo(self) -> bool:
        return bool(self._undo)

    @property
    def can_redo(self) -> bool:
        return bool(self._redo)

    def labels(self) -> List[str]:
        """Undo stack labels, oldest first."""
        return [entry.label for entry in self._undo]

    def clear(self) -> None:
        self._undo.clear()
        self._redo.clear()

    def __len__(self) -> int:
        return len(self._undo)
