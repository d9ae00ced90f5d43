"""
Song model - bars, channel tracks and notes on a fixed grid.

Provides the value types the shift transform reads and writes, snapshot
and restore helpers for undo, and conversion to and from music21 scores.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field, replace
from fractions import Fraction
from typing import List, Optional, Tuple
import logging

from music21 import chord, meter, note, pitch, stream

from bar_shift.core.grid import Grid

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Note:
    """A note placed within one bar of one channel track."""

    start: int  # part within the bar
    end: int  # part within the bar, exclusive
    pitches: Tuple[int, ...] = ()  # MIDI note numbers

    def __post_init__(self):
        if self.start < 0:
            raise ValueError(f"Note start must be >= 0, got {self.start}")
        if self.end <= self.start:
            raise ValueError(
                f"Note end must be after start, got start={self.start} end={self.end}"
            )

    @property
    def duration(self) -> int:
        """Length of the note in parts."""
        return self.end - self.start

    @property
    def pitch_names(self) -> List[str]:
        """Pitch names like "C4", "F#5"."""
        return [pitch.Pitch(midi=m).nameWithOctave for m in self.pitches]

    def moved(self, start: int, end: int) -> "Note":
        """Return a copy of this note at a new position."""
        return replace(self, start=start, end=end)


Track = List[Note]


@dataclass
class Bar:
    """One bar: a list of channel tracks, each a list of notes sorted by start."""

    channels: List[Track] = field(default_factory=list)

    @classmethod
    def empty(cls, channel_count: int) -> "Bar":
        """Create a bar with ``channel_count`` empty tracks."""
        return cls([[] for _ in range(channel_count)])

    @property
    def channel_count(self) -> int:
        return len(self.channels)

    @property
    def is_empty(self) -> bool:
        return not any(self.channels)

    def sort(self) -> None:
        """Sort every track by note start (stable)."""
        for track in self.channels:
            track.sort(key=lambda n: n.start)


@dataclass
class SongState:
    """Snapshot of the undoable parts of a song."""

    bars: List[Bar]
    loop_start: int
    loop_length: int


class Song:
    """
    A sequence of equal-length bars on a shared grid.

    Every bar holds the same number of channel tracks. The loop region is
    measured in bars and always lies within the song.
    """

    def __init__(
        self,
        grid: Optional[Grid] = None,
        bars: Optional[List[Bar]] = None,
        channel_count: Optional[int] = None,
        loop_start: int = 0,
        loop_length: Optional[int] = None,
    ):
        """
        Initialize a song.

        Args:
            grid: Time grid (defaults to 24 parts per beat, 8 beats per bar)
            bars: Bars of the song; one empty bar is created when omitted
            channel_count: Number of channel tracks, inferred from bars if omitted
            loop_start: First bar of the loop region
            loop_length: Number of bars in the loop region (whole song if omitted)
        """
        self.grid: Grid = grid or Grid()

        if channel_count is None:
            channel_count = bars[0].channel_count if bars else 1
        self.channel_count: int = channel_count

        self.bars: List[Bar] = bars if bars else [Bar.empty(channel_count)]
        self._validate_bars(self.bars)

        self.loop_start: int = loop_start
        self.loop_length: int = loop_length if loop_length is not None else len(self.bars)
        self.clamp_loop()

    @classmethod
    def empty(cls, grid: Optional[Grid] = None, bar_count: int = 1, channel_count: int = 1) -> "Song":
        """Create a song of empty bars."""
        bars = [Bar.empty(channel_count) for _ in range(max(1, bar_count))]
        return cls(grid, bars, channel_count)

    def _validate_bars(self, bars: List[Bar]) -> None:
        for index, bar in enumerate(bars):
            if bar.channel_count != self.channel_count:
                raise ValueError(
                    f"Bar {index} has {bar.channel_count} channels, "
                    f"expected {self.channel_count}"
                )

    @property
    def bar_count(self) -> int:
        return len(self.bars)

    @property
    def note_count(self) -> int:
        """Total number of notes across all bars and channels."""
        return sum(len(track) for bar in self.bars for track in bar.channels)

    def notes(self, channel: int) -> List[Tuple[int, Note]]:
        """Return ``(bar_index, note)`` pairs for one channel, in song order."""
        return [
            (bar_index, n)
            for bar_index, bar in enumerate(self.bars)
            for n in bar.channels[channel]
        ]

    def clamp_loop(self) -> None:
        """Keep the loop region inside the song."""
        self.loop_start = max(0, min(self.loop_start, self.bar_count - 1))
        self.loop_length = max(1, min(self.loop_length, self.bar_count - self.loop_start))

    def snapshot(self) -> SongState:
        """Capture a deep copy of the bars and the loop region."""
        return SongState(
            bars=copy.deepcopy(self.bars),
            loop_start=self.loop_start,
            loop_length=self.loop_length,
        )

    def restore(self, state: SongState) -> None:
        """Replace bars and loop region with a previously captured snapshot."""
        bars = copy.deepcopy(state.bars)
        self._validate_bars(bars)
        self.bars = bars
        self.loop_start = state.loop_start
        self.loop_length = state.loop_length

    # -- music21 interop --------------------------------------------------

    @classmethod
    def from_music21(cls, m21_score: stream.Score, parts_per_beat: int = 24) -> "Song":
        """
        Build a song from a music21 score.

        Each music21 part becomes a channel and each measure a bar. One beat
        is one quarter note. Rests are skipped, chords keep all pitches.

        Args:
            m21_score: music21 Score with parts and measures
            parts_per_beat: Grid resolution to quantize offsets to

        Returns:
            Song object
        """
        time_signature = m21_score.recurse().getElementsByClass(meter.TimeSignature).first()
        if time_signature is not None:
            beats_per_bar = max(1, round(time_signature.barDuration.quarterLength))
        else:
            beats_per_bar = 4

        grid = Grid(parts_per_beat=parts_per_beat, beats_per_bar=beats_per_bar)
        m21_parts = list(m21_score.parts)
        channel_count = max(1, len(m21_parts))
        measure_lists = [list(p.getElementsByClass(stream.Measure)) for p in m21_parts]
        bar_count = max([len(measures) for measures in measure_lists] + [1])

        bars = [Bar.empty(channel_count) for _ in range(bar_count)]
        for channel, measures in enumerate(measure_lists):
            for bar_index, measure in enumerate(measures):
                track = bars[bar_index].channels[channel]
                for element in measure.notes:
                    start = grid.beats_to_parts(Fraction(element.offset))
                    end = start + grid.beats_to_parts(Fraction(element.duration.quarterLength))
                    if end <= start:
                        logger.debug(f"Skipping zero-length {element} in measure {measure.number}")
                        continue
                    pitches = tuple(p.midi for p in element.pitches)
                    track.append(Note(start, end, pitches))
                track.sort(key=lambda n: n.start)

        return cls(grid, bars, channel_count)

    def to_music21(self) -> stream.Score:
        """
        Export the song as a music21 score.

        Notes that extend past their bar keep their full length.
        """
        m21_score = stream.Score()
        ppb = self.grid.parts_per_beat

        for channel in range(self.channel_count):
            part = stream.Part()
            part.id = f"Channel {channel + 1}"
            for bar_index, bar in enumerate(self.bars):
                measure = stream.Measure(number=bar_index + 1)
                if bar_index == 0:
                    measure.insert(0, meter.TimeSignature(f"{self.grid.beats_per_bar}/4"))
                for n in bar.channels[channel]:
                    quarter_length = Fraction(n.duration, ppb)
                    if len(n.pitches) > 1:
                        element = chord.Chord(list(n.pitches), quarterLength=quarter_length)
                    elif n.pitches:
                        element = note.Note(n.pitches[0], quarterLength=quarter_length)
                    else:
                        element = note.Unpitched(quarterLength=quarter_length)
                    measure.insert(Fraction(n.start, ppb), element)
                part.append(measure)
            m21_score.insert(0, part)

        return m21_score

    def __str__(self) -> str:
        return f"Song({self.bar_count} bars, {self.channel_count} channels, {self.note_count} notes)"

    def __repr__(self) -> str:
        return (
            f"Song(grid={self.grid!r}, "
            f"bars={self.bar_count}, "
            f"channels={self.channel_count}, "
            f"loop=({self.loop_start}, {self.loop_length}))"
        )
