from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)

ALERT_WINDOW_SECONDS = 30.0


@dataclass
class AlarmSessionState:
    active: bool = False
    vibration_enabled: bool = False


class AlarmSession:
    """A single bounded alert: sound, optional vibration, fixed window.

    The session knows nothing about manual or shift mode. Callers pass an
    ``on_complete`` callback to :meth:`trigger` and it runs once the alert
    has been torn down.
    """

    def __init__(
        self,
        scheduler,
        sound_player,
        vibrator=None,
        window_seconds: float = ALERT_WINDOW_SECONDS,
        vibration_enabled: bool = False,
        on_failure: Optional[Callable[[str, Exception], None]] = None,
        on_finished: Optional[Callable[[str], None]] = None,
    ):
        self.scheduler = scheduler
        self.sound_player = sound_player
        self.vibrator = vibrator
        self.window_seconds = window_seconds
        self.on_failure = on_failure
        self.on_finished = on_finished
        self._state = AlarmSessionState(vibration_enabled=vibration_enabled)
        self._window_handle = None
        self._vibrating = False
        self._completions: List[Callable[[], None]] = []

    @property
    def active(self) -> bool:
        return self._state.active

    @property
    def vibration_enabled(self) -> bool:
        return self._state.vibration_enabled

    @vibration_enabled.setter
    def vibration_enabled(self, enabled: bool) -> None:
        self._state.vibration_enabled = bool(enabled)

    def trigger(self, on_complete: Optional[Callable[[], None]] = None) -> bool:
        """Start the alert. Returns False when a session is already running or
        the sound could not be started.

        A callback handed in while a session is running is kept and run when
        that session ends, so a shift rotation is not lost behind a test alert.
        """

        if self._state.active:
            logger.info("Alarm session already active, trigger ignored")
            if on_complete is not None:
                self._completions.append(on_complete)
            return False

        self._state.active = True
        self._completions = [on_complete] if on_complete is not None else []
        logger.info("Alarm session started (vibration=%s)", self._state.vibration_enabled)

        if self._state.vibration_enabled and self.vibrator is not None:
            try:
                self.vibrator.start_pattern()
                self._vibrating = True
            except Exception as exc:
                logger.error("Vibration failed to start", exc_info=True)
                self._report("vibration", exc)

        try:
            self.sound_player.start_loop()
        except Exception as exc:
            logger.error("Alarm sound failed to start", exc_info=True)
            self._report("sound", exc)
            self._finish("failed")
            return False

        self._window_handle = self.scheduler.call_later(self.window_seconds, self._on_window_elapsed)
        return True

    def stop(self) -> bool:
        if not self._state.active:
            return False
        logger.info("Alarm session dismissed")
        self._finish("dismissed")
        return True

    def dispose(self) -> None:
        self._cancel_window()
        self._release()
        self._completions = []
        if self._state.active:
            logger.info("Alarm session disposed while active")
        self._state.active = False

    def _on_window_elapsed(self) -> None:
        self._window_handle = None
        self._finish("elapsed")

    def _cancel_window(self) -> None:
        if self._window_handle is not None:
            self._window_handle.cancel()
            self._window_handle = None

    def _finish(self, reason: str) -> None:
        self._cancel_window()
        self._release()
        self._state.active = False
        completions, self._completions = self._completions, []
        logger.info("Alarm session finished (%s)", reason)

        if self.on_finished:
            try:
                self.on_finished(reason)
            except Exception:
                logger.error("on_finished callback failed", exc_info=True)
        for callback in completions:
            try:
                callback()
            except Exception:
                logger.error("Alarm session completion callback failed", exc_info=True)

    def _release(self) -> None:
        try:
            self.sound_player.stop_loop()
        except Exception:
            logger.error("Failed to stop alarm sound", exc_info=True)
        try:
            self.sound_player.release()
        except Exception:
            logger.error("Failed to release alarm sound", exc_info=True)
        if self._vibrating and self.vibrator is not None:
            try:
                self.vibrator.cancel()
            except Exception:
                logger.error("Failed to stop vibration", exc_info=True)
        self._vibrating = False

    def _report(self, source: str, exc: Exception) -> None:
        if self.on_failure:
            try:
                self.on_failure(source, exc)
            except Exception:
                logger.error("on_failure callback failed", exc_info=True)
