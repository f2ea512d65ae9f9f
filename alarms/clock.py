from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum

CLOCK_TIME_RE = re.compile(r"^\s*(\d{1,2})\s*[:.]\s*(\d{2})\s*([AaPp])\.?\s*[Mm]\.?\s*$")


class Period(Enum):
    AM = "AM"
    PM = "PM"


@dataclass(frozen=True)
class ClockTime:
    """Time of day on a 12-hour clock."""

    hour12: int
    minute: int
    period: Period = Period.AM

    def __post_init__(self) -> None:
        if isinstance(self.period, str):
            try:
                object.__setattr__(self, "period", Period(self.period.upper()))
            except ValueError as exc:
                raise ValueError(f"Period must be AM or PM, got {self.period!r}") from exc
        if not 1 <= self.hour12 <= 12:
            raise ValueError(f"Hour must be between 1 and 12, got {self.hour12}")
        if not 0 <= self.minute <= 59:
            raise ValueError(f"Minute must be between 0 and 59, got {self.minute}")

    @classmethod
    def parse(cls, text: str) -> "ClockTime":
        match = CLOCK_TIME_RE.match(text or "")
        if not match:
            raise ValueError(f"Expected a time like '07:55 AM', got {text!r}")
        return cls(int(match.group(1)), int(match.group(2)), Period(match.group(3).upper() + "M"))

    @property
    def hour24(self) -> int:
        if self.period is Period.AM:
            return 0 if self.hour12 == 12 else self.hour12
        # noon stays 12, not 24
        return self.hour12 if self.hour12 == 12 else self.hour12 + 12

    def __str__(self) -> str:
        return f"{self.hour12:02d}:{self.minute:02d} {self.period.value}"


def resolve(clock_time: ClockTime, reference: datetime) -> datetime:
    """Bind ``clock_time`` to the date of ``reference`` and roll to the next
    day when that instant is not strictly after ``reference``."""

    candidate = reference.replace(hour=clock_time.hour24, minute=clock_time.minute, second=0, microsecond=0)
    if candidate <= reference:
        candidate = candidate + timedelta(days=1)
    return candidate
