from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional, Tuple

from .clock import ClockTime, resolve

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ShiftSchedule:
    name: str
    times: Tuple[ClockTime, ...]

    def __post_init__(self) -> None:
        times = tuple(self.times)
        if not times:
            raise ValueError(f"Shift {self.name!r} needs at least one time")
        object.__setattr__(self, "times", times)

    @classmethod
    def from_strings(cls, name: str, times: Iterable[str]) -> "ShiftSchedule":
        return cls(name=name, times=tuple(ClockTime.parse(t) for t in times))

    def __len__(self) -> int:
        return len(self.times)


def initial_next(schedule: ShiftSchedule, reference: datetime) -> Tuple[int, datetime]:
    """Pick the entry whose next occurrence is closest to ``reference``.

    Schedule order does not matter here; after rollover a later entry can
    still be the nearest one today.
    """

    best: Optional[Tuple[int, datetime]] = None
    for index, clock_time in enumerate(schedule.times):
        instant = resolve(clock_time, reference)
        if instant <= reference:
            continue
        if best is None or instant < best[1]:
            best = (index, instant)
    if best is None:
        logger.warning("No future entry found for shift %s, using first entry", schedule.name)
        return 0, resolve(schedule.times[0], reference)
    return best


def advance(schedule: ShiftSchedule, current_index: int) -> int:
    return (current_index + 1) % len(schedule.times)


class ShiftCycle:
    """Tracks which entry of a shift the active countdown targets."""

    def __init__(self, schedule: ShiftSchedule):
        self.schedule = schedule
        self.current_index = 0

    @property
    def current_time(self) -> ClockTime:
        return self.schedule.times[self.current_index]

    def start(self, reference: datetime) -> datetime:
        self.current_index, instant = initial_next(self.schedule, reference)
        return instant

    def advance(self) -> int:
        self.current_index = advance(self.schedule, self.current_index)
        return self.current_index
