from __future__ import annotations

import logging
from threading import Event, Thread
from typing import Callable, Optional, Sequence

try:
    import winsound
except ImportError:  # pragma: no cover - non-Windows hosts
    winsound = None  # type: ignore

logger = logging.getLogger(__name__)

DEFAULT_PATTERN_MS = (500, 500)


def parse_pattern(text: str) -> tuple:
    """Parse ``"500,500"`` into on/off durations in milliseconds."""

    try:
        pattern = tuple(int(part) for part in text.split(",") if part.strip())
    except ValueError as exc:
        raise ValueError(f"Vibration pattern must be comma separated integers, got {text!r}") from exc
    if not pattern or len(pattern) % 2 or any(p <= 0 for p in pattern):
        raise ValueError(f"Vibration pattern needs positive on/off pairs, got {text!r}")
    return pattern


def _default_pulse(duration_ms: int) -> None:
    if winsound:
        try:
            winsound.Beep(110, duration_ms)
            return
        except RuntimeError:
            logger.debug("winsound.Beep failed for vibration pulse")
    logger.info("Bzzz (%s ms)", duration_ms)


class PatternVibrator:
    """Repeats an on/off pattern until cancelled.

    ``pulse`` is called with the "on" duration in milliseconds; hosts with a
    real actuator pass their own.
    """

    def __init__(self, pattern_ms: Sequence[int] = DEFAULT_PATTERN_MS, pulse: Optional[Callable[[int], None]] = None):
        self.pattern_ms = tuple(pattern_ms)
        self.pulse = pulse or _default_pulse
        self._stop_event = Event()
        self._thread: Optional[Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start_pattern(self) -> None:
        if self.running:
            return
        self._stop_event.clear()
        self._thread = Thread(target=self._loop, name="alarm-vibration", daemon=True)
        self._thread.start()

    def cancel(self) -> None:
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=1)
            self._thread = None

    def _loop(self) -> None:  # pragma: no cover - timing loop
        while not self._stop_event.is_set():
            for on_ms, off_ms in zip(self.pattern_ms[::2], self.pattern_ms[1::2]):
                if self._stop_event.is_set():
                    return
                try:
                    self.pulse(on_ms)
                except Exception:
                    logger.error("Vibration pulse failed", exc_info=True)
                    return
                self._stop_event.wait(off_ms / 1000.0)
