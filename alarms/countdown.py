from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)

# Firing one tick early keeps the last second from being skipped on a tick boundary.
EXPIRY_THRESHOLD = timedelta(seconds=1)


class CountdownPhase(Enum):
    IDLE = "idle"
    ARMED = "armed"


@dataclass
class CountdownState:
    target: Optional[datetime] = None
    remaining: Optional[timedelta] = None

    @property
    def phase(self) -> CountdownPhase:
        return CountdownPhase.IDLE if self.target is None else CountdownPhase.ARMED

    def clear(self) -> None:
        self.target = None
        self.remaining = None


class CountdownEngine:
    """Counts down to a single target instant and signals expiry once.

    ``scheduler`` must provide ``now()`` and ``call_repeating(interval, cb)``
    returning a handle with ``cancel()``.
    """

    def __init__(
        self,
        scheduler,
        on_expired: Callable[[datetime], None],
        tick_interval: float = 1.0,
    ):
        self.scheduler = scheduler
        self.on_expired = on_expired
        self.tick_interval = tick_interval
        self._state = CountdownState()
        self._tick_handle = None
        self._listeners: List[Callable[[timedelta], None]] = []

    @property
    def phase(self) -> CountdownPhase:
        return self._state.phase

    @property
    def is_armed(self) -> bool:
        return self._state.phase is CountdownPhase.ARMED

    @property
    def target(self) -> Optional[datetime]:
        return self._state.target

    @property
    def remaining(self) -> Optional[timedelta]:
        return self._state.remaining

    def add_listener(self, listener: Callable[[timedelta], None]) -> None:
        if not callable(listener):
            raise ValueError("Listener must be callable")
        self._listeners.append(listener)

    def arm(self, target: datetime) -> None:
        self._stop_ticking()
        self._state.target = target
        self._state.remaining = target - self.scheduler.now()
        self._tick_handle = self.scheduler.call_repeating(self.tick_interval, self._tick)
        logger.info("Countdown armed for %s (remaining %s)", target.isoformat(), self._state.remaining)
        self._publish(self._state.remaining)

    def cancel(self) -> None:
        if not self.is_armed and self._tick_handle is None:
            return
        self._stop_ticking()
        self._state.clear()
        logger.info("Countdown cancelled")

    def _stop_ticking(self) -> None:
        if self._tick_handle is not None:
            self._tick_handle.cancel()
            self._tick_handle = None

    def _tick(self) -> None:
        target = self._state.target
        if target is None:
            # Stale tick from a schedule that was already cancelled.
            self._stop_ticking()
            return
        remaining = target - self.scheduler.now()
        if remaining <= EXPIRY_THRESHOLD:
            self._stop_ticking()
            self._state.clear()
            logger.info("Countdown expired for %s", target.isoformat())
            self.on_expired(target)
            return
        self._state.remaining = remaining
        self._publish(remaining)

    def _publish(self, remaining: timedelta) -> None:
        for listener in list(self._listeners):
            try:
                listener(remaining)
            except Exception:
                logger.error("Countdown listener failed", exc_info=True)
