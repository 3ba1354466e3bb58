"""Unit tests for the deterministic tick scheduler."""

from __future__ import annotations

import pytest

from linewatch.monitoring import PeriodicTask, TickScheduler, run_realtime, running


def test_tasks_fire_in_due_order_with_registration_tie_break() -> None:
    calls: list[tuple[str, int]] = []
    scheduler = TickScheduler()
    scheduler.add("slow", 12_000, lambda now_ms: calls.append(("slow", now_ms)))
    scheduler.add("fast", 3_000, lambda now_ms: calls.append(("fast", now_ms)))

    with running(scheduler, 0):
        fired = scheduler.advance_to(12_000)

    assert fired == 5
    assert calls == [
        ("fast", 3_000),
        ("fast", 6_000),
        ("fast", 9_000),
        ("slow", 12_000),
        ("fast", 12_000),
    ]


def test_advance_is_incremental() -> None:
    calls: list[int] = []
    scheduler = TickScheduler()
    scheduler.add("tick", 1_000, calls.append)

    with running(scheduler, 500):
        scheduler.advance_to(1_499)
        assert calls == []
        scheduler.advance_by(1)
        scheduler.advance_to(3_600)

    assert calls == [1_500, 2_500, 3_500]


def test_now_reflects_tick_time_inside_handler() -> None:
    seen: list[int | None] = []
    scheduler = TickScheduler()
    scheduler.add("tick", 2_000, lambda now_ms: seen.append(scheduler.now_ms))

    with running(scheduler, 0):
        scheduler.advance_to(5_000)
        assert scheduler.now_ms == 5_000

    assert seen == [2_000, 4_000]


def test_running_stops_tasks_when_block_raises() -> None:
    scheduler = TickScheduler()
    task = scheduler.add("tick", 1_000, lambda now_ms: None)

    with pytest.raises(RuntimeError, match="boom"):
        with running(scheduler, 0):
            assert task.running
            raise RuntimeError("boom")

    assert not task.running
    assert scheduler.now_ms is None


def test_stop_from_handler_halts_advance() -> None:
    calls: list[int] = []
    scheduler = TickScheduler()

    def handler(now_ms: int) -> None:
        calls.append(now_ms)
        if len(calls) == 2:
            scheduler.stop()

    scheduler.add("tick", 1_000, handler)
    scheduler.start(0)

    assert scheduler.advance_to(10_000) == 2
    assert calls == [1_000, 2_000]


def test_advance_requires_started_scheduler() -> None:
    scheduler = TickScheduler()

    with pytest.raises(RuntimeError, match="not started"):
        scheduler.advance_to(1_000)


def test_advance_rejects_time_travel() -> None:
    scheduler = TickScheduler()
    scheduler.start(5_000)

    with pytest.raises(ValueError, match="backwards"):
        scheduler.advance_to(4_000)


def test_task_rejects_non_positive_period() -> None:
    with pytest.raises(ValueError, match="period_ms"):
        PeriodicTask("bad", 0, lambda now_ms: None)


def test_run_realtime_uses_injected_clock_and_sleep() -> None:
    clock = {"now": 10_000}
    calls: list[int] = []

    def fake_sleep(seconds: float) -> None:
        clock["now"] += int(round(seconds * 1000))

    scheduler = TickScheduler()
    task = scheduler.add("tick", 3_000, calls.append)

    fired = run_realtime(scheduler, duration_s=10, clock=lambda: clock["now"], sleep=fake_sleep)

    assert fired == 3
    assert calls == [13_000, 16_000, 19_000]
    assert not task.running


def test_run_realtime_rejects_non_positive_duration() -> None:
    with pytest.raises(ValueError, match="duration_s"):
        run_realtime(TickScheduler(), duration_s=0)


def test_run_realtime_anchors_ticks_to_given_start() -> None:
    clock = {"now": 10_500}
    calls: list[int] = []

    def fake_sleep(seconds: float) -> None:
        clock["now"] += int(round(seconds * 1000))

    scheduler = TickScheduler()
    scheduler.add("tick", 3_000, calls.append)

    run_realtime(scheduler, duration_s=7, clock=lambda: clock["now"], sleep=fake_sleep, start_ms=10_000)

    assert calls == [13_000, 16_000]


def test_run_realtime_rejects_start_ahead_of_clock() -> None:
    with pytest.raises(ValueError, match="ahead of the clock"):
        run_realtime(TickScheduler(), duration_s=1, clock=lambda: 1_000, sleep=lambda seconds: None, start_ms=5_000)
