from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from .clock import CLOCK_TIME_RE, ClockTime

ARM_WORDS = ("set", "arm", "start")
STOP_WORDS = ("stop", "dismiss")
QUIT_WORDS = ("quit", "exit")
ON_WORDS = ("on", "yes", "true", "1")
OFF_WORDS = ("off", "no", "false", "0")


@dataclass
class AlarmCommand:
    action: str
    mode: Optional[str] = None
    clock_time: Optional[ClockTime] = None
    shift_name: Optional[str] = None
    enabled: Optional[bool] = None
    error: Optional[str] = None
    raw_text: str = ""


def parse_command(text: str) -> Optional[AlarmCommand]:
    """Parse a console command such as ``manual 7:30 PM`` or ``shift Shift 2``."""

    cleaned = text.strip()
    if not cleaned:
        return None
    head, _, rest = cleaned.partition(" ")
    verb = head.lower()
    rest = rest.strip()

    if CLOCK_TIME_RE.match(cleaned):
        return _manual_command(cleaned, cleaned)

    if verb == "manual":
        if not rest:
            return AlarmCommand(action="select", mode="manual", raw_text=cleaned)
        return _manual_command(rest, cleaned)

    if verb == "shift":
        if not rest:
            return AlarmCommand(action="select", mode="shift", raw_text=cleaned)
        # "shift 2" is shorthand for "shift Shift 2"
        name = f"Shift {rest}" if re.fullmatch(r"\d+", rest) else rest
        return AlarmCommand(action="select", mode="shift", shift_name=name, raw_text=cleaned)

    if verb == "mode":
        mode = rest.lower()
        if mode not in ("manual", "shift"):
            return AlarmCommand(action="unknown", error="Mode must be 'manual' or 'shift'.", raw_text=cleaned)
        return AlarmCommand(action="select", mode=mode, raw_text=cleaned)

    if verb in ("vibration", "vibrate"):
        value = rest.lower()
        if value in ON_WORDS:
            return AlarmCommand(action="vibration", enabled=True, raw_text=cleaned)
        if value in OFF_WORDS:
            return AlarmCommand(action="vibration", enabled=False, raw_text=cleaned)
        return AlarmCommand(action="vibration", raw_text=cleaned)

    if verb in ARM_WORDS:
        return AlarmCommand(action="arm", raw_text=cleaned)
    if verb == "cancel":
        return AlarmCommand(action="cancel", raw_text=cleaned)
    if verb == "test":
        return AlarmCommand(action="test", raw_text=cleaned)
    if verb in STOP_WORDS:
        return AlarmCommand(action="stop", raw_text=cleaned)
    if verb == "status":
        return AlarmCommand(action="status", raw_text=cleaned)
    if verb in ("shifts", "list"):
        return AlarmCommand(action="list", raw_text=cleaned)
    if verb in ("help", "?"):
        return AlarmCommand(action="help", raw_text=cleaned)
    if verb in QUIT_WORDS:
        return AlarmCommand(action="quit", raw_text=cleaned)
    return None


def _manual_command(time_text: str, raw: str) -> AlarmCommand:
    try:
        clock_time = ClockTime.parse(time_text)
    except ValueError as exc:
        return AlarmCommand(action="unknown", error=str(exc), raw_text=raw)
    return AlarmCommand(action="select", mode="manual", clock_time=clock_time, raw_text=raw)
