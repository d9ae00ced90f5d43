"""
Grid model - discrete time coordinates for a song.

A song is divided into bars of ``beats_per_bar`` beats, and each beat is
divided into ``parts_per_beat`` parts. A part is the smallest addressable
time unit. Positions are either absolute (parts since the start of the
song) or bar-relative (bar index plus part within that bar).
"""

from __future__ import annotations

import math
from fractions import Fraction
from dataclasses import dataclass
from numbers import Real
from typing import Tuple


class GridConfigurationError(ValueError):
    """Raised when a grid is built from non-positive dimensions."""


def round_half_up(value: Real) -> int:
    """Round to the nearest integer, ties toward positive infinity."""
    return math.floor(value + Fraction(1, 2))


@dataclass(frozen=True)
class Grid:
    """Time grid shared by every bar of a song."""

    parts_per_beat: int = 24
    beats_per_bar: int = 8

    def __post_init__(self):
        for name in ("parts_per_beat", "beats_per_bar"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise GridConfigurationError(
                    f"{name} must be a positive integer, got {value!r}"
                )

    @property
    def parts_per_bar(self) -> int:
        """Number of parts in one bar."""
        return self.parts_per_beat * self.beats_per_bar

    def to_absolute(self, bar_index: int, part: int) -> int:
        """
        Convert a bar-relative position to an absolute part index.

        Args:
            bar_index: Bar index (0-based, may be negative)
            part: Part within the bar (may exceed the bar length)

        Returns:
            Absolute part index
        """
        return bar_index * self.parts_per_bar + part

    def to_bar_relative(self, absolute: int) -> Tuple[int, int]:
        """
        Convert an absolute part index to ``(bar_index, part)``.

        Uses floored division, so the part is never negative: absolute
        part -4 on a 16-part grid is bar -1, part 12.
        """
        return divmod(absolute, self.parts_per_bar)

    def beats_to_parts(self, beats: Real) -> int:
        """Convert a beat count to the nearest whole number of parts."""
        return round_half_up(beats * self.parts_per_beat)

    def parts_to_beats(self, parts: int) -> float:
        """Convert a part count to beats."""
        return parts / self.parts_per_beat
