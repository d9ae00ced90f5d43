"""
Undo/redo history built from reversible changes.

Each user action is recorded as one Change, however many bars and notes
it touches, so a single undo or redo cycles the whole action.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Optional
import logging

logger = logging.getLogger(__name__)


class Change(ABC):
    """A reversible edit to a song document."""

    description: str = "Edit"
    bar_count_changed: bool = False

    @abstractmethod
    def apply(self) -> None:
        """Perform (or redo) the edit."""

    @abstractmethod
    def revert(self) -> None:
        """Undo the edit."""


class UndoHistory:
    """
    Bounded undo/redo stacks of Change objects.

    Recording a new change clears the redo stack. When the undo stack is
    full the oldest change is discarded.
    """

    def __init__(self, max_size: int = 50):
        self.max_size = max_size
        self._undo_stack: List[Change] = []
        self._redo_stack: List[Change] = []

    def push(self, change: Change) -> None:
        """Record a change that has already been applied."""
        self._undo_stack.append(change)
        if len(self._undo_stack) > self.max_size:
            self._undo_stack.pop(0)
        self._redo_stack.clear()

    def undo(self) -> Optional[Change]:
        """
        Revert the most recent change.

        Returns:
            The reverted change, or None if there was nothing to undo
        """
        if not self._undo_stack:
            return None
        change = self._undo_stack.pop()
        change.revert()
        self._redo_stack.append(change)
        logger.debug(f"Undid {change.description}")
        return change

    def redo(self) -> Optional[Change]:
        """
        Re-apply the most recently undone change.

        Returns:
            The re-applied change, or None if there was nothing to redo
        """
        if not self._redo_stack:
            return None
        change = self._redo_stack.pop()
        change.apply()
        self._undo_stack.append(change)
        logger.debug(f"Redid {change.description}")
        return change

    def can_undo(self) -> bool:
        """Check if undo is available."""
        return len(self._undo_stack) > 0

    def can_redo(self) -> bool:
        """Check if redo is available."""
        return len(self._redo_stack) > 0

    @property
    def undo_descriptions(self) -> List[str]:
        """Descriptions of undoable changes, oldest first."""
        return [c.description for c in self._undo_stack]

    def clear(self) -> None:
        """Clear all history."""
        self._undo_stack.clear()
        self._redo_stack.clear()

    def __len__(self) -> int:
        return len(self._undo_stack)
