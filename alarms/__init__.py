"""Alarm scheduling for the wellness alarm."""

from .clock import ClockTime, Period, resolve
from .manager import AlarmManager, AlarmStatus
from .parser import AlarmCommand, parse_command
from .shifts import ShiftCycle, ShiftSchedule, advance, initial_next
