from __future__ import annotations

import asyncio
from enum import Enum
from typing import Callable, Protocol

from sessionkit.core.logging import get_logger

logger = get_logger(__name__)


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle: ...


class LoopScheduler:
    """Schedules callbacks on the running asyncio loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(delay, callback)


class TimerKind(str, Enum):
    WARNING = "warning"
    CLOSE = "close"


class SessionTimers:
    """The two delayed session callbacks: expiry warning and warning auto-close.

    At most one handle per kind is pending; scheduling a kind cancels its previous handle
    first. Every scheduled callback is bound to the generation current at scheduling time,
    and `invalidate()` moves to a new generation, so a callback that slips past
    cancellation can never act on a superseded session.
    """

    def __init__(self, scheduler: Scheduler | None = None) -> None:
        self._scheduler = scheduler or LoopScheduler()
        self._handles: dict[TimerKind, TimerHandle] = {}
        self._generation = 0

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def pending(self) -> frozenset[TimerKind]:
        return frozenset(self._handles)

    def is_pending(self, kind: TimerKind) -> bool:
        return kind in self._handles

    def schedule(self, kind: TimerKind, delay: float, callback: Callable[[], None]) -> None:
        self.cancel(kind)
        generation = self._generation

        def fire() -> None:
            if generation != self._generation:
                logger.debug("stale_timer_skipped", kind=kind.value, generation=generation)
                return
            self._handles.pop(kind, None)
            callback()

        self._handles[kind] = self._scheduler.call_later(max(0.0, delay), fire)
        logger.debug("timer_scheduled", kind=kind.value, delay=delay, generation=generation)

    def cancel(self, kind: TimerKind) -> bool:
        handle = self._handles.pop(kind, None)
        if handle is None:
            return False
        handle.cancel()
        return True

    def cancel_all(self) -> None:
        for kind in list(self._handles):
            self.cancel(kind)

    def invalidate(self) -> int:
        """Cancel everything and start a new generation. Returns the new generation."""
        self.cancel_all()
        self._generation += 1
        return self._generation
