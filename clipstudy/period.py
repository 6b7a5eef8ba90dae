"""
clipstudy.period - Time spans within a media file.
"""

from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class Period:
    """A span of time in seconds, ``begin <= end``."""

    begin: float
    end: float

    def __post_init__(self) -> None:
        if not (math.isfinite(self.begin) and math.isfinite(self.end)):
            raise ValueError(f"Period bounds must be finite: {self.begin}, {self.end}")
        if self.begin < 0:
            raise ValueError(f"Period cannot begin before 0: {self.begin}")
        if self.end < self.begin:
            raise ValueError(f"Period ends before it begins: {self.begin} > {self.end}")

    def duration(self) -> float:
        return self.end - self.begin

    def midpoint(self) -> float:
        return self.begin + self.duration() / 2

    def contains(self, time: float) -> bool:
        return self.begin <= time <= self.end

    def grow(self, before: float, after: float) -> Period:
        """Return a wider period, clamped so it never begins before 0."""
        return Period(max(0.0, self.begin - before), self.end + after)
