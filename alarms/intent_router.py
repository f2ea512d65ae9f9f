from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from time_utils import format_alarm_time

from .manager import AlarmManager
from .parser import parse_command

logger = logging.getLogger(__name__)

HELP_TEXT = "\n".join(
    [
        "Commands:",
        "  manual 07:30 AM     choose a manual alarm time",
        "  shift Shift 2       choose a shift schedule (or: shift 2)",
        "  mode manual|shift   switch mode, keeping its last parameters",
        "  set                 arm the alarm for the current selection",
        "  cancel              cancel the countdown",
        "  test                sound the alert now",
        "  stop                dismiss a ringing alert",
        "  vibration on|off    toggle vibration for the next alert",
        "  status              show the current state",
        "  shifts              list shift schedules",
        "  quit                exit",
    ]
)


@dataclass
class IntentResult:
    handled: bool
    response_text: Optional[str] = None
    action: Optional[str] = None
    quit: bool = False


class IntentRouter:
    def __init__(self, alarm_manager: AlarmManager):
        self.alarm_manager = alarm_manager

    def handle_text(self, text: str) -> IntentResult:
        parsed = parse_command(text)
        if not parsed:
            return IntentResult(handled=False, response_text="Unknown command, type 'help'.")
        logger.debug("Command parsed: %s", parsed)
        manager = self.alarm_manager

        if parsed.action == "unknown":
            return IntentResult(handled=True, response_text=parsed.error, action=parsed.action)

        if parsed.action == "select":
            params = parsed.clock_time or parsed.shift_name
            try:
                manager.set_selection(parsed.mode, params)
            except ValueError as exc:
                return IntentResult(handled=True, response_text=f"Not changed: {exc}", action="select")
            return IntentResult(
                handled=True, response_text=f"Selected {manager.selection.describe()}.", action="select"
            )

        if parsed.action == "arm":
            try:
                target = manager.arm_from_selection()
            except ValueError as exc:
                return IntentResult(handled=True, response_text=f"Alarm not set: {exc}", action="arm")
            now = manager.scheduler.now()
            return IntentResult(
                handled=True, response_text=f"Alarm set for {format_alarm_time(target, now)}.", action="arm"
            )

        if parsed.action == "cancel":
            was_armed = manager.countdown.is_armed
            manager.cancel()
            resp = "Alarm cancelled." if was_armed else "No alarm is set."
            return IntentResult(handled=True, response_text=resp, action="cancel")

        if parsed.action == "test":
            if manager.test_alert():
                resp = "Testing alert."
            elif manager.session.active:
                resp = "An alert is already ringing."
            else:
                resp = "Alert could not start."
            return IntentResult(handled=True, response_text=resp, action="test")

        if parsed.action == "stop":
            resp = "Alert stopped." if manager.stop_alert() else "Nothing is ringing."
            return IntentResult(handled=True, response_text=resp, action="stop")

        if parsed.action == "vibration":
            if parsed.enabled is not None:
                manager.vibration_enabled = parsed.enabled
            state = "on" if manager.vibration_enabled else "off"
            return IntentResult(handled=True, response_text=f"Vibration is {state}.", action="vibration")

        if parsed.action == "status":
            return IntentResult(handled=True, response_text=self._format_status(), action="status")

        if parsed.action == "list":
            lines = []
            for name, schedule in manager.schedules.items():
                marker = "*" if name == manager.selection.shift_name else " "
                lines.append(f"{marker} {name}: " + ", ".join(str(t) for t in schedule.times))
            resp = "\n".join(lines) if lines else "No shift schedules configured."
            return IntentResult(handled=True, response_text=resp, action="list")

        if parsed.action == "help":
            return IntentResult(handled=True, response_text=HELP_TEXT, action="help")

        if parsed.action == "quit":
            return IntentResult(handled=True, response_text="Bye.", action="quit", quit=True)

        return IntentResult(handled=True, response_text=None, action=parsed.action)

    def _format_status(self) -> str:
        status = self.alarm_manager.status()
        lines = [f"Mode: {status.mode.value} ({status.selection})"]
        if status.armed and status.target is not None:
            now = self.alarm_manager.scheduler.now()
            lines.append(f"Alarm: {format_alarm_time(status.target, now)}, time left {status.remaining}")
        else:
            lines.append("Alarm: not set")
        lines.append(f"Alert: {'ringing' if status.alert_active else 'idle'}")
        lines.append(f"Vibration: {'on' if status.vibration_enabled else 'off'}")
        return "\n".join(lines)
