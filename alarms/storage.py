from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, Mapping

from .shifts import ShiftSchedule

logger = logging.getLogger(__name__)

DEFAULT_SHIFTS = {
    "Shift 1": ["07:55 AM", "09:55 AM"],
    "Shift 2": ["03:55 PM", "07:55 PM"],
    "Shift 3": ["01:55 AM", "03:55 AM"],
}


def shifts_from_dict(payload: Mapping[str, list]) -> Dict[str, ShiftSchedule]:
    if not isinstance(payload, Mapping):
        raise ValueError("Shift schedules must be a JSON object of name -> list of times")
    schedules: Dict[str, ShiftSchedule] = {}
    for name, times in payload.items():
        if isinstance(times, str) or not isinstance(times, list):
            raise ValueError(f"Shift {name!r} must list its times, got {times!r}")
        try:
            schedules[name] = ShiftSchedule.from_strings(name, times)
        except ValueError as exc:
            raise ValueError(f"Invalid shift {name!r}: {exc}") from exc
    return schedules


def default_shift_schedules() -> Dict[str, ShiftSchedule]:
    return shifts_from_dict(DEFAULT_SHIFTS)


def load_shift_schedules(path: Path) -> Dict[str, ShiftSchedule]:
    """Load shift definitions; key order in the file is the display order."""

    if not path.exists():
        return default_shift_schedules()
    try:
        with path.open("r", encoding="utf-8") as f:
            payload = json.load(f)
    except (OSError, json.JSONDecodeError) as exc:
        logger.error("Failed to load shift schedules from %s: %s", path, exc)
        return default_shift_schedules()
    schedules = shifts_from_dict(payload)
    if not schedules:
        logger.warning("No shifts defined in %s, using defaults", path)
        return default_shift_schedules()
    logger.info("Loaded %s shift schedules from %s", len(schedules), path)
    return schedules


def save_shift_schedules(path: Path, schedules: Mapping[str, ShiftSchedule]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    serializable = {name: [str(t) for t in schedule.times] for name, schedule in schedules.items()}
    with path.open("w", encoding="utf-8") as f:
        json.dump(serializable, f, ensure_ascii=False, indent=2)
