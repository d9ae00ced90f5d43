"""
Song document - the live song plus its edit history.

The document is the only place song state is mutated. Edits are
recorded as Change objects on its UndoHistory, and listeners are told
after every commit, undo and redo.
"""

from __future__ import annotations

from typing import Callable, List, Optional
import logging

from bar_shift.core.history import Change, UndoHistory
from bar_shift.core.song import Song, SongState

logger = logging.getLogger(__name__)

# Called with the document and whether the bar count changed.
Listener = Callable[["SongDocument", bool], None]


class SnapshotChange(Change):
    """
    A change stored as the song state before and after the edit.

    Applying restores the "after" state, reverting restores "before".
    """

    def __init__(
        self,
        document: "SongDocument",
        before: SongState,
        after: SongState,
        description: str = "Edit",
    ):
        self._document = document
        self.before = before
        self.after = after
        self.description = description

    @property
    def bar_count_changed(self) -> bool:
        return len(self.before.bars) != len(self.after.bars)

    def apply(self) -> None:
        self._document.song.restore(self.after)

    def revert(self) -> None:
        self._document.song.restore(self.before)


class SongDocument:
    """
    Owns a Song and its undo/redo history.

    Provides:
    - Recording of already-applied changes
    - Undo/redo of whole changes
    - Change notification for bar-count-dependent state
    """

    def __init__(self, song: Optional[Song] = None, max_undo: int = 50):
        """
        Initialize the document.

        Args:
            song: Song to edit (an empty song if omitted)
            max_undo: Maximum number of undoable changes
        """
        self.song: Song = song or Song()
        self.history = UndoHistory(max_undo)
        self._is_modified: bool = False
        self._listeners: List[Listener] = []

    @property
    def is_modified(self) -> bool:
        """Check if the song has been modified since it was opened or saved."""
        return self._is_modified

    def mark_saved(self) -> None:
        self._is_modified = False

    def add_listener(self, callback: Listener) -> None:
        """Register a callback run after every commit, undo and redo."""
        self._listeners.append(callback)

    def remove_listener(self, callback: Listener) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)

    def _notify(self, bar_count_changed: bool) -> None:
        for callback in self._listeners:
            callback(self, bar_count_changed)

    def record(self, change: Change, bar_count_changed: bool = False) -> None:
        """
        Record a change that has already been applied to the song.

        Args:
            change: The applied change
            bar_count_changed: Whether the change added or removed bars
        """
        self.history.push(change)
        self._is_modified = True
        logger.debug(f"Recorded {change.description}")
        self._notify(bar_count_changed)

    def undo(self) -> bool:
        """
        Undo the last change.

        Returns:
            True if undo was successful, False if nothing to undo
        """
        change = self.history.undo()
        if change is None:
            return False
        self._is_modified = True
        self._notify(change.bar_count_changed)
        return True

    def redo(self) -> bool:
        """
        Redo the last undone change.

        Returns:
            True if redo was successful, False if nothing to redo
        """
        change = self.history.redo()
        if change is None:
            return False
        self._is_modified = True
        self._notify(change.bar_count_changed)
        return True

    def can_undo(self) -> bool:
        """Check if undo is available."""
        return self.history.can_undo()

    def can_redo(self) -> bool:
        """Check if redo is available."""
        return self.history.can_redo()

    def __repr__(self) -> str:
        return f"SongDocument({self.song}, undo={len(self.history)})"
