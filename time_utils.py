from __future__ import annotations

from datetime import datetime, timedelta
from typing import NamedTuple, Union


class Remaining(NamedTuple):
    hours: int
    minutes: int
    seconds: int

    @property
    def total_seconds(self) -> int:
        return self.hours * 3600 + self.minutes * 60 + self.seconds

    def __str__(self) -> str:
        return f"{self.hours}h {self.minutes}m {self.seconds}s"


def split_duration(duration: Union[timedelta, int, float]) -> Remaining:
    """Decompose a duration (timedelta or total milliseconds) into whole
    hours, minutes and seconds. Negative durations clamp to zero."""

    if isinstance(duration, timedelta):
        total_ms = int(duration.total_seconds() * 1000)
    else:
        total_ms = int(duration)
    total_ms = max(0, total_ms)
    hours = total_ms // 3_600_000
    minutes = (total_ms % 3_600_000) // 60_000
    seconds = (total_ms % 60_000) // 1000
    return Remaining(hours, minutes, seconds)


def format_remaining(duration: Union[Remaining, timedelta, None]) -> str:
    if duration is None:
        return "Time Left: --"
    if not isinstance(duration, Remaining):
        duration = split_duration(duration)
    return f"Time Left: {duration}"


def countdown_display_due(remaining: Remaining, every_seconds: int, final_seconds: int = 10) -> bool:
    """Whether a console countdown line should be printed for this tick.

    Prints on each multiple of ``every_seconds`` and every second of the
    last ``final_seconds``.
    """

    total = remaining.total_seconds
    if total <= final_seconds:
        return True
    return every_seconds <= 1 or total % every_seconds == 0


def format_alarm_time(dt: datetime, now: datetime) -> str:
    if dt.date() == now.date():
        day_prefix = "today "
    elif dt.date() == now.date() + timedelta(days=1):
        day_prefix = "tomorrow "
    else:
        day_prefix = dt.strftime("%d.%m ")
    return f"{day_prefix}{dt.strftime('%I:%M %p')}"
