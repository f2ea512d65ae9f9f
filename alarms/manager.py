from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, List, Mapping, Optional, Union

from time_utils import Remaining, split_duration

from .clock import ClockTime
from .countdown import CountdownEngine
from .selection import Mode, ScheduleSelection, SelectionState
from .session import ALERT_WINDOW_SECONDS, AlarmSession
from .shifts import ShiftSchedule

logger = logging.getLogger(__name__)


@dataclass
class AlarmStatus:
    mode: Mode
    selection: str
    armed: bool
    target: Optional[datetime]
    remaining: Optional[Remaining]
    alert_active: bool
    vibration_enabled: bool


class AlarmManager:
    """Ties selection, countdown and alert session together.

    Every method is expected to run on the scheduler's loop thread.
    """

    def __init__(
        self,
        scheduler,
        sound_player,
        schedules: Mapping[str, ShiftSchedule],
        vibrator=None,
        selection: Optional[SelectionState] = None,
        tick_interval: float = 1.0,
        alert_window_seconds: float = ALERT_WINDOW_SECONDS,
        vibration_enabled: bool = False,
        on_alarm_triggered: Optional[Callable[[datetime, ScheduleSelection], None]] = None,
        on_armed: Optional[Callable[[datetime, ScheduleSelection], None]] = None,
        on_alert_failed: Optional[Callable[[str, Exception], None]] = None,
    ):
        self.scheduler = scheduler
        self.selection = selection or SelectionState(schedules)
        self.on_alarm_triggered = on_alarm_triggered
        self.on_armed = on_armed
        self.on_alert_failed = on_alert_failed

        self.session = AlarmSession(
            scheduler,
            sound_player,
            vibrator=vibrator,
            window_seconds=alert_window_seconds,
            vibration_enabled=vibration_enabled,
            on_failure=self._on_session_failure,
        )
        self.countdown = CountdownEngine(scheduler, self._on_countdown_expired, tick_interval=tick_interval)
        self.countdown.add_listener(self._publish_remaining)

        self._armed_selection: Optional[ScheduleSelection] = None
        # Bumped on every user arm/cancel so stale shift re-arms are dropped.
        self._generation = 0
        self._remaining_listeners: List[Callable[[Remaining], None]] = []

    @property
    def schedules(self) -> Mapping[str, ShiftSchedule]:
        return self.selection.schedules

    @property
    def vibration_enabled(self) -> bool:
        return self.session.vibration_enabled

    @vibration_enabled.setter
    def vibration_enabled(self, enabled: bool) -> None:
        self.session.vibration_enabled = enabled
        logger.info("Vibration %s", "enabled" if enabled else "disabled")

    @property
    def armed_selection(self) -> Optional[ScheduleSelection]:
        return self._armed_selection

    def set_selection(self, mode: Union[Mode, str], params: Union[ClockTime, str, None] = None) -> None:
        """Switch mode and update its parameter (clock time or shift name).

        Raises ValueError and leaves the selection untouched when ``mode`` or
        ``params`` is invalid.
        """

        if isinstance(mode, str):
            try:
                mode = Mode(mode.strip().lower())
            except ValueError as exc:
                raise ValueError(f"Mode must be 'manual' or 'shift', got {mode!r}") from exc

        if mode is Mode.MANUAL:
            if params is not None:
                self.selection.set_manual_time(params)
        elif params is not None:
            if isinstance(params, ClockTime):
                raise ValueError("Shift mode expects a shift name")
            self.selection.set_shift(params)
        self.selection.set_mode(mode)

        # A ringing shift alert still holds a pending re-arm even though the countdown is idle.
        if self.countdown.is_armed or self._armed_selection is not None:
            logger.info("Selection changed, cancelling the active schedule")
            self.cancel()

    def arm_from_selection(self) -> datetime:
        now = self.scheduler.now()
        selection, target = self.selection.compute_initial_target(now)
        self._generation += 1
        self._armed_selection = selection
        self.countdown.arm(target)
        logger.info("Alarm set: %s -> %s", selection.describe(), target.isoformat())
        self._notify_armed(target, selection)
        return target

    def cancel(self) -> None:
        self._generation += 1
        self._armed_selection = None
        self.countdown.cancel()

    def test_alert(self) -> bool:
        logger.info("Test alert requested")
        return self.session.trigger()

    def stop_alert(self) -> bool:
        return self.session.stop()

    def remaining_duration(self) -> Optional[Remaining]:
        remaining = self.countdown.remaining
        return split_duration(remaining) if remaining is not None else None

    def add_remaining_listener(self, listener: Callable[[Remaining], None]) -> None:
        if not callable(listener):
            raise ValueError("Listener must be callable")
        self._remaining_listeners.append(listener)

    def status(self) -> AlarmStatus:
        armed = self._armed_selection if self.countdown.is_armed else None
        return AlarmStatus(
            mode=self.selection.mode,
            selection=armed.describe() if armed else self.selection.describe(),
            armed=self.countdown.is_armed,
            target=self.countdown.target,
            remaining=self.remaining_duration(),
            alert_active=self.session.active,
            vibration_enabled=self.vibration_enabled,
        )

    def shutdown(self) -> None:
        self.cancel()
        self.session.dispose()
        logger.info("Alarm manager shut down")

    def _on_countdown_expired(self, target: datetime) -> None:
        selection = self._armed_selection
        generation = self._generation
        on_complete = None
        if selection is not None and selection.cyclic:
            on_complete = lambda: self._rearm_next(selection, generation)  # noqa: E731
        else:
            self._armed_selection = None

        logger.info("Alarm triggered for %s", target.isoformat())
        if self.on_alarm_triggered and selection is not None:
            try:
                self.on_alarm_triggered(target, selection)
            except Exception:  # pragma: no cover - callback safety
                logger.error("on_alarm_triggered callback failed", exc_info=True)
        self.session.trigger(on_complete)

    def _rearm_next(self, selection: ScheduleSelection, generation: int) -> None:
        if generation != self._generation or selection is not self._armed_selection:
            logger.info("Schedule changed since the alarm fired, not re-arming")
            return
        target = selection.next_target(self.scheduler.now())
        if target is None:
            return
        self.countdown.arm(target)
        logger.info("Next shift alarm: %s -> %s", selection.describe(), target.isoformat())
        self._notify_armed(target, selection)

    def _publish_remaining(self, remaining: timedelta) -> None:
        value = split_duration(remaining)
        for listener in list(self._remaining_listeners):
            try:
                listener(value)
            except Exception:
                logger.error("Remaining listener failed", exc_info=True)

    def _notify_armed(self, target: datetime, selection: ScheduleSelection) -> None:
        if self.on_armed:
            try:
                self.on_armed(target, selection)
            except Exception:  # pragma: no cover - callback safety
                logger.error("on_armed callback failed", exc_info=True)

    def _on_session_failure(self, source: str, exc: Exception) -> None:
        if self.on_alert_failed:
            try:
                self.on_alert_failed(source, exc)
            except Exception:  # pragma: no cover - callback safety
                logger.error("on_alert_failed callback failed", exc_info=True)
