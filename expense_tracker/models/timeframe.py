from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class TimeFrame(str, Enum):
    ALL = "all"
    TODAY = "today"
    WEEK = "week"
    MONTH = "month"
    QUARTER = "quarter"
    HALF_YEAR = "half_year"
    YEAR = "year"

    @property
    def is_rolling(self) -> bool:
        return self in (TimeFrame.QUARTER, TimeFrame.HALF_YEAR)


SCORING_FRAMES = (
    TimeFrame.WEEK,
    TimeFrame.MONTH,
    TimeFrame.QUARTER,
    TimeFrame.HALF_YEAR,
    TimeFrame.YEAR,
)


@dataclass(frozen=True)
class TimeWindow:
    """Interval of instants; half-open unless `closed` (rolling lookbacks)."""

    start: datetime
    end: datetime
    closed: bool = False

    def contains(self, moment: datetime) -> bool:
        if moment < self.start:
            return False
        if self.closed:
            return moment <= self.end
        return moment < self.end
