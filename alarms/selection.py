from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Mapping, Optional, Union

from .clock import ClockTime, Period, resolve
from .shifts import ShiftCycle, ShiftSchedule

DEFAULT_MANUAL_TIME = ClockTime(8, 30, Period.AM)


class Mode(Enum):
    MANUAL = "manual"
    SHIFT = "shift"


@dataclass
class ManualSelection:
    clock_time: ClockTime
    cyclic = False

    def compute_initial_target(self, reference: datetime) -> datetime:
        return resolve(self.clock_time, reference)

    def next_target(self, reference: datetime) -> Optional[datetime]:
        return None

    def describe(self) -> str:
        return f"manual {self.clock_time}"


@dataclass
class ShiftSelection:
    schedule: ShiftSchedule
    cycle: ShiftCycle = field(init=False)
    cyclic = True

    def __post_init__(self) -> None:
        self.cycle = ShiftCycle(self.schedule)

    @property
    def current_index(self) -> int:
        return self.cycle.current_index

    def compute_initial_target(self, reference: datetime) -> datetime:
        return self.cycle.start(reference)

    def next_target(self, reference: datetime) -> Optional[datetime]:
        self.cycle.advance()
        return resolve(self.cycle.current_time, reference)

    def describe(self) -> str:
        return f"{self.schedule.name} #{self.cycle.current_index + 1} ({self.cycle.current_time})"


ScheduleSelection = Union[ManualSelection, ShiftSelection]


class SelectionState:
    """The user's chosen mode plus the parameters of both modes."""

    def __init__(
        self,
        schedules: Mapping[str, ShiftSchedule],
        mode: Mode = Mode.MANUAL,
        manual_time: ClockTime = DEFAULT_MANUAL_TIME,
        shift_name: Optional[str] = None,
    ):
        if not schedules and mode is Mode.SHIFT:
            raise ValueError("Shift mode needs at least one shift schedule")
        self.schedules = dict(schedules)
        self.mode = mode
        self.manual_time = manual_time
        self.shift_name = shift_name if shift_name is not None else next(iter(self.schedules), None)
        if self.shift_name is not None and self.shift_name not in self.schedules:
            raise ValueError(f"Unknown shift {self.shift_name!r}")

    def set_mode(self, mode: Union[Mode, str]) -> Mode:
        if isinstance(mode, str):
            try:
                mode = Mode(mode.strip().lower())
            except ValueError as exc:
                raise ValueError(f"Mode must be 'manual' or 'shift', got {mode!r}") from exc
        if mode is Mode.SHIFT and self.shift_name is None:
            raise ValueError("No shift schedules are configured")
        self.mode = mode
        return mode

    def set_manual_time(self, clock_time: Union[ClockTime, str]) -> ClockTime:
        if isinstance(clock_time, str):
            clock_time = ClockTime.parse(clock_time)
        self.manual_time = clock_time
        return clock_time

    def set_shift(self, name: str) -> ShiftSchedule:
        schedule = self.schedules.get(name)
        if schedule is None:
            matches = [s for key, s in self.schedules.items() if key.lower() == name.strip().lower()]
            if not matches:
                raise ValueError(f"Unknown shift {name!r}")
            schedule = matches[0]
        self.shift_name = schedule.name
        return schedule

    def describe(self) -> str:
        if self.mode is Mode.SHIFT:
            return f"shift {self.shift_name}"
        return f"manual {self.manual_time}"

    def current(self) -> ScheduleSelection:
        if self.mode is Mode.SHIFT:
            return ShiftSelection(self.schedules[self.shift_name])
        return ManualSelection(self.manual_time)

    def compute_initial_target(self, reference: datetime):
        """Return ``(selection, target)`` for the current mode."""

        selection = self.current()
        return selection, selection.compute_initial_target(reference)
