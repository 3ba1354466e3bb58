"""Deterministic periodic-task scheduler with explicit start/stop lifecycle."""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from typing import Callable, Iterator

logger = logging.getLogger(__name__)

TickHandler = Callable[[int], object]


class PeriodicTask:
    """One fixed-period task. Ticks fire at ``start + k * period_ms``."""

    def __init__(self, name: str, period_ms: int, handler: TickHandler) -> None:
        if period_ms <= 0:
            raise ValueError("period_ms must be > 0")
        self.name = name
        self.period_ms = period_ms
        self._handler = handler
        self._next_due_ms: int | None = None
        self.ticks = 0

    @property
    def running(self) -> bool:
        return self._next_due_ms is not None

    @property
    def next_due_ms(self) -> int | None:
        return self._next_due_ms

    def start(self, now_ms: int) -> None:
        if self.running:
            return
        self._next_due_ms = now_ms + self.period_ms

    def stop(self) -> None:
        self._next_due_ms = None

    def fire(self) -> int:
        """Run the handler for the pending tick and schedule the next one."""
        if self._next_due_ms is None:
            raise RuntimeError(f"task {self.name} is not running")
        due_ms = self._next_due_ms
        self._next_due_ms = due_ms + self.period_ms
        self.ticks += 1
        self._handler(due_ms)
        return due_ms


class TickScheduler:
    """Steps registered tasks through time in due order.

    Tasks due at the same instant fire in registration order. Time only moves
    when ``advance_to`` is called, so tests can step simulated time exactly.
    """

    def __init__(self) -> None:
        self._tasks: list[PeriodicTask] = []
        self._now_ms: int | None = None

    @property
    def tasks(self) -> tuple[PeriodicTask, ...]:
        return tuple(self._tasks)

    @property
    def now_ms(self) -> int | None:
        return self._now_ms

    def add(self, name: str, period_ms: int, handler: TickHandler) -> PeriodicTask:
        task = PeriodicTask(name, period_ms, handler)
        self._tasks.append(task)
        if self._now_ms is not None:
            task.start(self._now_ms)
        return task

    def start(self, now_ms: int) -> None:
        self._now_ms = now_ms
        for task in self._tasks:
            task.start(now_ms)
        logger.debug("scheduler started with %d tasks at %d", len(self._tasks), now_ms)

    def stop(self) -> None:
        for task in self._tasks:
            task.stop()
        self._now_ms = None
        logger.debug("scheduler stopped")

    def next_due_ms(self) -> int | None:
        due = [task.next_due_ms for task in self._tasks if task.next_due_ms is not None]
        return min(due) if due else None

    def advance_to(self, now_ms: int) -> int:
        """Fire every tick due at or before ``now_ms``; returns ticks fired."""
        if self._now_ms is None:
            raise RuntimeError("scheduler is not started")
        if now_ms < self._now_ms:
            raise ValueError("cannot move scheduler time backwards")

        fired = 0
        while True:
            task = self._next_due_task(now_ms)
            if task is None:
                break
            self._now_ms = task.next_due_ms
            task.fire()
            fired += 1
            if self._now_ms is None:
                # stopped from inside a handler
                return fired
        self._now_ms = now_ms
        return fired

    def advance_by(self, delta_ms: int) -> int:
        if self._now_ms is None:
            raise RuntimeError("scheduler is not started")
        return self.advance_to(self._now_ms + delta_ms)

    def _next_due_task(self, now_ms: int) -> PeriodicTask | None:
        selected: PeriodicTask | None = None
        for task in self._tasks:
            due = task.next_due_ms
            if due is None or due > now_ms:
                continue
            if selected is None or due < selected.next_due_ms:  # type: ignore[operator]
                selected = task
        return selected


@contextmanager
def running(scheduler: TickScheduler, now_ms: int) -> Iterator[TickScheduler]:
    """Start ``scheduler`` for the block and stop every task on exit."""
    scheduler.start(now_ms)
    try:
        yield scheduler
    finally:
        scheduler.stop()


def wall_clock_ms() -> int:
    return int(time.time() * 1000)


def run_realtime(
    scheduler: TickScheduler,
    *,
    duration_s: float,
    clock: Callable[[], int] = wall_clock_ms,
    sleep: Callable[[float], None] = time.sleep,
    start_ms: int | None = None,
) -> int:
    """Drive ``scheduler`` against ``clock`` for ``duration_s`` seconds.

    ``start_ms`` anchors the first tick; it must not lie ahead of ``clock()``.
    Defaults to the current clock reading.
    """
    if duration_s <= 0:
        raise ValueError("duration_s must be > 0")
    if start_ms is None:
        start_ms = clock()
    elif start_ms > clock():
        raise ValueError("start_ms must not be ahead of the clock")
    end_ms = start_ms + int(duration_s * 1000)
    fired = 0
    with running(scheduler, start_ms):
        while True:
            now_ms = max(clock(), scheduler.now_ms or start_ms)
            if now_ms >= end_ms:
                fired += scheduler.advance_to(end_ms) if scheduler.now_ms is not None else 0
                break
            fired += scheduler.advance_to(now_ms)
            if scheduler.now_ms is None:
                break
            next_due = scheduler.next_due_ms()
            wake_ms = end_ms if next_due is None else min(next_due, end_ms)
            wait_ms = wake_ms - clock()
            if wait_ms > 0:
                sleep(wait_ms / 1000)
    return fired
