from __future__ import annotations

import logging
import time
from datetime import datetime
from queue import Empty, Queue
from threading import Event, Timer
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class TimerHandle:
    """One pending timer. ``interval`` set means the timer repeats."""

    def __init__(self, scheduler: "EventLoopScheduler", callback: Callable[[], None], interval: Optional[float] = None):
        self._scheduler = scheduler
        self._callback = callback
        self.interval = interval
        self._cancelled = False
        self._timer: Optional[Timer] = None
        self._next_due = time.monotonic()

    @property
    def active(self) -> bool:
        return not self._cancelled

    def cancel(self) -> None:
        self._cancelled = True
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _schedule(self, delay: float) -> None:
        # Repeating timers keep a fixed cadence instead of drifting by callback time.
        self._next_due += delay
        wait = max(0.0, self._next_due - time.monotonic())
        self._timer = Timer(wait, self._scheduler.post, args=(self._fire,))
        self._timer.daemon = True
        self._timer.start()

    def _fire(self) -> None:
        if self._cancelled:
            return
        if self.interval is None:
            self._cancelled = True
        else:
            self._schedule(self.interval)
        self._callback()


class EventLoopScheduler:
    """Runs every timer callback and posted command on a single loop thread.

    Timer threads never touch alarm state; they only put callables on the
    queue drained by :meth:`run_forever`.
    """

    def __init__(self, clock: Callable[[], datetime] = datetime.now, poll_interval: float = 0.2):
        self._clock = clock
        self.poll_interval = poll_interval
        self._queue: "Queue[Callable[[], None]]" = Queue()
        self._stop_event = Event()

    def now(self) -> datetime:
        return self._clock()

    def post(self, callback: Callable[[], None]) -> None:
        self._queue.put(callback)

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        handle = TimerHandle(self, callback)
        handle._schedule(max(0.0, delay))
        return handle

    def call_repeating(self, interval: float, callback: Callable[[], None]) -> TimerHandle:
        if interval <= 0:
            raise ValueError("Repeating interval must be positive")
        handle = TimerHandle(self, callback, interval=interval)
        handle._schedule(interval)
        return handle

    @property
    def running(self) -> bool:
        return not self._stop_event.is_set()

    def run_forever(self) -> None:
        logger.debug("Event loop started")
        while not self._stop_event.is_set():
            try:
                callback = self._queue.get(timeout=self.poll_interval)
            except Empty:
                continue
            try:
                callback()
            except Exception:
                logger.error("Scheduled callback failed", exc_info=True)
        logger.debug("Event loop stopped")

    def stop(self) -> None:
        self._stop_event.set()
