"""Pytest configuration and shared fixtures."""

import os

# Set test environment variables before any imports
# Use valid-format token to pass aiogram validation
os.environ["BOT_TOKEN"] = "123456789:ABCdefGHIjklMNOpqrsTUVwxyz"
os.environ["BOT_MODE"] = "polling"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test_thelist.db"
os.environ["WHEEL_CUE_AUDIO"] = ""

import heapq
import itertools

import pytest


@pytest.fixture(scope="session")
def anyio_backend():
    """Use asyncio as the async backend for tests."""
    return "asyncio"


class FakeHandle:
    def __init__(self) -> None:
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeTimers:
    """Virtual clock: callbacks run only when advance() passes their due time.

    Timers with equal due times fire in scheduling order.
    """

    def __init__(self) -> None:
        self.now = 0
        self._queue: list[tuple[int, int, FakeHandle, object]] = []
        self._seq = itertools.count()
        self.scheduled = 0

    def call_later(self, delay_ms, callback):
        handle = FakeHandle()
        heapq.heappush(self._queue, (self.now + delay_ms, next(self._seq), handle, callback))
        self.scheduled += 1
        return handle

    @property
    def pending(self) -> int:
        return sum(1 for _, _, handle, _ in self._queue if not handle.cancelled)

    def advance(self, ms: int) -> None:
        target = self.now + ms
        while self._queue and self._queue[0][0] <= target:
            due, _, handle, callback = heapq.heappop(self._queue)
            self.now = due
            if not handle.cancelled:
                callback()
        self.now = target

    def run_all(self) -> None:
        while self._queue:
            self.advance(max(self._queue[0][0] - self.now, 0))


class RecordingDisplay:
    """SpinDisplay that records every call."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, object]] = []

    def show_spinning(self) -> None:
        self.calls.append(("spinning", None))

    def show_current(self, candidate) -> None:
        self.calls.append(("current", candidate))

    def show_result(self, candidate) -> None:
        self.calls.append(("result", candidate))

    def show_message(self, text: str) -> None:
        self.calls.append(("message", text))

    def clear(self) -> None:
        self.calls.append(("clear", None))

    def of(self, kind: str) -> list:
        return [value for name, value in self.calls if name == kind]


class FixedRandom:
    """random.Random stand-in returning a fixed sequence of values."""

    def __init__(self, *values: float) -> None:
        self._values = list(values) or [0.0]
        self._i = 0

    def random(self) -> float:
        value = self._values[min(self._i, len(self._values) - 1)]
        self._i += 1
        return value


@pytest.fixture
def timers():
    return FakeTimers()


@pytest.fixture
def display():
    return RecordingDisplay()


@pytest.fixture
def fixed_random():
    return FixedRandom
