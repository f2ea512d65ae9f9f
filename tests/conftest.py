from datetime import datetime, timedelta
from itertools import count

import pytest


class FakeHandle:
    def __init__(self, due: datetime, callback, interval, seq: int):
        self.due = due
        self.callback = callback
        self.interval = interval
        self.seq = seq
        self.cancelled = False

    @property
    def active(self) -> bool:
        return not self.cancelled

    def cancel(self) -> None:
        self.cancelled = True


class FakeScheduler:
    """Deterministic stand-in for EventLoopScheduler driven by advance()."""

    def __init__(self, start: datetime):
        self.current = start
        self.handles = []
        self._seq = count()

    def now(self) -> datetime:
        return self.current

    def call_later(self, delay, callback):
        return self._add(delay, callback, None)

    def call_repeating(self, interval, callback):
        return self._add(interval, callback, interval)

    def _add(self, delay, callback, interval):
        self.handles = [h for h in self.handles if h.active]
        handle = FakeHandle(self.current + timedelta(seconds=delay), callback, interval, next(self._seq))
        self.handles.append(handle)
        return handle

    def pending(self, repeating=None):
        return [
            h
            for h in self.handles
            if h.active and (repeating is None or (h.interval is not None) == repeating)
        ]

    def advance(self, seconds: float) -> None:
        end = self.current + timedelta(seconds=seconds)
        while True:
            due = [h for h in self.handles if h.active and h.due <= end]
            if not due:
                break
            handle = min(due, key=lambda h: (h.due, h.seq))
            self.current = max(self.current, handle.due)
            if handle.interval is None:
                handle.cancelled = True
            else:
                handle.due = handle.due + timedelta(seconds=handle.interval)
            handle.callback()
        self.current = end


class FakeSoundPlayer:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.starts = 0
        self.stops = 0
        self.releases = 0
        self.playing = False

    def start_loop(self) -> None:
        if self.fail:
            raise OSError("no output device")
        self.starts += 1
        self.playing = True

    def stop_loop(self) -> None:
        self.stops += 1
        self.playing = False

    def release(self) -> None:
        self.releases += 1
        self.playing = False


class FakeVibrator:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.starts = 0
        self.cancels = 0

    def start_pattern(self) -> None:
        if self.fail:
            raise RuntimeError("no actuator")
        self.starts += 1

    def cancel(self) -> None:
        self.cancels += 1


@pytest.fixture
def player():
    return FakeSoundPlayer()


@pytest.fixture
def vibrator():
    return FakeVibrator()


@pytest.fixture
def make_scheduler():
    return FakeScheduler


@pytest.fixture
def failing_player():
    return FakeSoundPlayer(fail=True)


@pytest.fixture
def failing_vibrator():
    return FakeVibrator(fail=True)
