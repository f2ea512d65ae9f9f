import logging
import signal
import sys
from datetime import datetime
from threading import Thread

from alarms.intent_router import IntentRouter
from alarms.manager import AlarmManager
from alarms.selection import Mode, ScheduleSelection, SelectionState
from alarms.sounds import AlarmSoundPlayer, LocalSpeaker
from alarms.storage import load_shift_schedules
from alarms.timers import EventLoopScheduler
from alarms.vibration import PatternVibrator
from config import Config, load_config, setup_logging
from time_utils import Remaining, countdown_display_due, format_alarm_time, format_remaining

logger = logging.getLogger("wellness_alarm")


def graceful_exit(signum, frame) -> None:  # pragma: no cover - signal handler
    logger.info("Shutting down (signal %s)", signum)
    raise KeyboardInterrupt()


class AlarmRuntime:
    def __init__(self, config: Config, scheduler: EventLoopScheduler):
        self.config = config
        self.scheduler = scheduler
        schedules = load_shift_schedules(config.shifts_path)
        selection = SelectionState(
            schedules,
            mode=Mode(config.default_mode),
            manual_time=config.default_manual_time,
            shift_name=config.default_shift,
        )
        self.local_speaker = LocalSpeaker() if config.speak_confirmations else None
        self.alarm_manager = AlarmManager(
            scheduler,
            AlarmSoundPlayer(config.alarm_sound_path),
            schedules,
            vibrator=PatternVibrator(config.vibration_pattern_ms),
            selection=selection,
            tick_interval=config.tick_interval_ms / 1000.0,
            alert_window_seconds=config.alert_window_seconds,
            vibration_enabled=config.vibration_enabled,
            on_alarm_triggered=self._on_alarm_triggered,
            on_armed=self._on_armed,
            on_alert_failed=self._on_alert_failed,
        )
        self.alarm_manager.add_remaining_listener(self._on_remaining)
        self.router = IntentRouter(self.alarm_manager)
        self.input_thread: Thread | None = None

    def start(self) -> None:
        self.input_thread = Thread(target=self._input_loop, name="console-input", daemon=True)
        self.input_thread.start()

    def shutdown(self) -> None:
        self.alarm_manager.shutdown()
        self.scheduler.stop()

    def _input_loop(self) -> None:
        for line in sys.stdin:
            self.scheduler.post(lambda text=line: self._handle_line(text))
        self.scheduler.post(self.scheduler.stop)

    def _handle_line(self, text: str) -> None:
        if not text.strip():
            return
        result = self.router.handle_text(text)
        if result.response_text:
            print(result.response_text, flush=True)
        if result.quit:
            self.scheduler.stop()

    def _say(self, text: str) -> None:
        print(text, flush=True)
        if self.local_speaker and self.local_speaker.available:
            self.local_speaker.speak_async(text)

    def _on_remaining(self, remaining: Remaining) -> None:
        logger.debug("Time Left: %s", remaining)
        if countdown_display_due(remaining, self.config.countdown_display_seconds):
            print(format_remaining(remaining), flush=True)

    def _on_armed(self, target: datetime, selection: ScheduleSelection) -> None:
        self._say(f"Alarm set for {format_alarm_time(target, self.scheduler.now())} ({selection.describe()}).")

    def _on_alarm_triggered(self, target: datetime, selection: ScheduleSelection) -> None:
        print(f"Wake up! {target.strftime('%I:%M %p')} ({selection.describe()})", flush=True)

    def _on_alert_failed(self, source: str, exc: Exception) -> None:
        print(f"Alert {source} failed: {exc}", flush=True)


def main() -> None:
    config = load_config()
    setup_logging(config.log_level)
    logger.info("Starting wellness alarm")
    signal.signal(signal.SIGINT, graceful_exit)

    scheduler = EventLoopScheduler()
    runtime = AlarmRuntime(config, scheduler)
    print("Wellness Alarm. Type 'help' for commands.", flush=True)
    runtime.start()
    try:
        scheduler.run_forever()
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
    finally:
        runtime.shutdown()


if __name__ == "__main__":
    main()
