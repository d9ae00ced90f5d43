"""
Move Notes Sideways command - apply a note shift to a song document.

Bridges the shift transform and the SongDocument: the shift is computed
against a snapshot of the song, committed in one step, and recorded as
a single undoable change.
"""

from __future__ import annotations

from typing import Optional, Union
import logging

from bar_shift.config import ShiftConfig
from bar_shift.core.document import SnapshotChange, SongDocument
from bar_shift.core.shift import (
    OffsetInput,
    ShiftResult,
    ShiftStrategy,
    shift_notes,
    snap_offset_beats,
)
from bar_shift.core.song import SongState

logger = logging.getLogger(__name__)


class MoveNotesSideways:
    """
    Moves every note in a document's song by a number of beats.

    The offset is sanitized like the offset entry field does it, so raw
    user input is safe. Either the whole shift is committed and recorded
    as one undo step, or the song is left as it was.
    """

    def __init__(self, document: SongDocument, config: Optional[ShiftConfig] = None):
        self._document = document
        self._config = config or ShiftConfig()

    def resolve_strategy(self, strategy: Union[ShiftStrategy, str, None]) -> ShiftStrategy:
        """Turn a strategy or strategy tag into a ShiftStrategy, falling back to the default."""
        if isinstance(strategy, ShiftStrategy):
            return strategy

        resolved = ShiftStrategy.from_value(strategy) if strategy is not None else None
        if resolved is None:
            default = ShiftStrategy.from_value(self._config.last_strategy) or ShiftStrategy.OVERFLOW
            if strategy is not None:
                logger.warning(f"Unknown strategy {strategy!r}, using {default.value}")
            resolved = default
        return resolved

    def apply(
        self,
        offset_beats: OffsetInput,
        strategy: Union[ShiftStrategy, str, None] = None,
    ) -> bool:
        """
        Shift all notes and record the shift as one undoable change.

        Args:
            offset_beats: Beats to move (negative is left, positive is right)
            strategy: ShiftStrategy or its tag; the configured default if None

        Returns:
            True once the song holds the shifted notes (a zero offset is a
            successful no-op and records nothing)

        Listeners run after the shift is committed and recorded; an error
        raised by a listener propagates but does not undo the shift.
        """
        song = self._document.song
        strategy = self.resolve_strategy(strategy)
        beats = snap_offset_beats(offset_beats, song.grid)
        offset_parts = song.grid.beats_to_parts(beats)

        if offset_parts == 0:
            logger.debug("Zero offset, nothing to move")
            return True

        before = song.snapshot()
        result = shift_notes(song.bars, song.grid, offset_parts, strategy)
        after = self._state_after(before, result)

        # restore() validates before assigning, so a rejected state leaves the song as it was.
        song.restore(after)

        change = SnapshotChange(
            self._document,
            before,
            after,
            description=f"Move notes {float(beats):+g} beats ({strategy.value})",
        )
        self._document.record(change, result.bar_count_changed)

        logger.info(
            f"Moved {song.note_count} notes by {beats} beats ({strategy.value}), "
            f"{len(before.bars)} -> {song.bar_count} bars"
        )
        return True

    @staticmethod
    def _state_after(before: SongState, result: ShiftResult) -> SongState:
        """New song state with the loop region following any bars added in front."""
        bar_count = len(result.bars)
        loop_start = min(before.loop_start + result.bars_added_front, bar_count - 1)
        loop_length = max(1, min(before.loop_length, bar_count - loop_start))
        return SongState(result.bars, loop_start, loop_length)
