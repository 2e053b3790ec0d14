from __future__ import annotations

import heapq
import itertools
from datetime import datetime, timedelta, timezone
from typing import Callable

import pytest
from fastapi.testclient import TestClient

from sessionkit.config import Settings
from sessionkit.main import create_app

TEST_SECRET = "test-secret-that-is-long-enough-for-hs256-signing"


class ManualClock:
    """Settable UTC clock."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime.now(timezone.utc).replace(microsecond=0)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


class ManualHandle:
    def __init__(self) -> None:
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """call_later replacement driven by ManualClock.advance-style stepping."""

    def __init__(self, clock: ManualClock) -> None:
        self._clock = clock
        self._queue: list[tuple[datetime, int, ManualHandle, Callable[[], None]]] = []
        self._seq = itertools.count()

    def call_later(self, delay: float, callback: Callable[[], None]) -> ManualHandle:
        handle = ManualHandle()
        due = self._clock.now + timedelta(seconds=delay)
        heapq.heappush(self._queue, (due, next(self._seq), handle, callback))
        return handle

    @property
    def active(self) -> int:
        return sum(1 for _, _, handle, _ in self._queue if not handle.cancelled)

    def advance(self, seconds: float) -> None:
        target = self._clock.now + timedelta(seconds=seconds)
        while self._queue and self._queue[0][0] <= target:
            due, _, handle, callback = heapq.heappop(self._queue)
            if handle.cancelled:
                continue
            self._clock.now = due
            callback()
        self._clock.now = target


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        DATABASE_URL="sqlite://",
        JWT_SECRET=TEST_SECRET,
        BCRYPT_ROUNDS=4,
        APP_LOG_PATH=str(tmp_path / "logs" / "app.log"),
        ERROR_LOG_PATH=str(tmp_path / "logs" / "error.log"),
        API_BASE_URL="http://testserver",
        CLIENT_LOG_ENABLED=False,
        LOG_SHIP_MAX_RETRIES=1,
        BACKOFF_FACTOR=0.01,
    )


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app) -> TestClient:
    with TestClient(app) as c:
        yield c


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def scheduler(clock) -> ManualScheduler:
    return ManualScheduler(clock)
