"""Run the stagnant-production monitor over simulated or wall-clock time."""

from __future__ import annotations

import argparse
import json
import logging
import sys
import time
from collections import Counter
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Callable, Sequence

import numpy as np

from linewatch.alerts import AlertView, scope_alerts, sort_alerts, summarize_alerts
from linewatch.domain import default_registry, seed_alerts
from linewatch.monitoring import (
    DetectorEvent,
    MonitorConfig,
    StagnationEngine,
    TickScheduler,
    parse_idle_threshold,
    run_realtime,
    running,
)
from linewatch.monitoring.scheduler import wall_clock_ms

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class MonitorRunResult:
    """Outcome of one monitor run."""

    start_ms: int
    end_ms: int
    ticks: int
    detector_actions: tuple[tuple[str, int], ...]
    report_path: Path | None


def build_parser() -> argparse.ArgumentParser:
    """Create parser for the monitor run."""
    parser = argparse.ArgumentParser(
        prog="linewatch-monitor",
        description=(
            "Simulate production counters for active machines and raise alerts when an active "
            "machine stops producing for longer than the idle threshold."
        ),
    )
    parser.add_argument(
        "--idle-min",
        type=str,
        default=None,
        help="Idle threshold in minutes. Invalid or non-positive values fall back to 10.",
    )
    parser.add_argument(
        "--minutes",
        type=float,
        default=30.0,
        help="Simulated minutes to run (ignored with --realtime).",
    )
    parser.add_argument(
        "--realtime",
        action=argparse.BooleanOptionalAction,
        default=False,
        help="Drive ticks from the wall clock instead of stepping simulated time.",
    )
    parser.add_argument("--duration-s", type=float, default=60.0, help="Wall-clock run length for --realtime.")
    parser.add_argument("--start-ms", type=int, default=None, help="Simulated start epoch (default: now). Not allowed with --realtime.")
    parser.add_argument("--seed", type=int, default=42, help="Counter simulator RNG seed.")
    parser.add_argument("--increase-probability", type=float, default=0.8)
    parser.add_argument("--max-increment", type=int, default=5)
    parser.add_argument("--simulator-period-ms", type=int, default=12_000)
    parser.add_argument("--detector-period-ms", type=int, default=3_000)
    parser.add_argument(
        "--auto-resolve",
        action=argparse.BooleanOptionalAction,
        default=False,
        help="Resolve a stagnation alert once the machine's counter advances again.",
    )
    parser.add_argument(
        "--seed-alerts",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Start with the reference set of manually-authored alerts.",
    )
    parser.add_argument("--report", type=Path, default=None, help="Optional JSON report output path.")
    parser.add_argument("--log-level", type=str, default="INFO")
    return parser


def run_monitor_from_args(
    args: argparse.Namespace,
    *,
    clock: Callable[[], int] = wall_clock_ms,
    sleep: Callable[[float], None] = time.sleep,
) -> MonitorRunResult:
    """Build the engine from CLI args, run it and optionally write a report.

    In realtime mode the engine and the scheduler share ``clock``, so counters
    start at the same instant the first tick is measured from.
    """
    if args.realtime and args.start_ms is not None:
        raise ValueError("--start-ms cannot be combined with --realtime")
    config = MonitorConfig(
        idle_threshold_minutes=parse_idle_threshold(args.idle_min),
        simulator_period_ms=args.simulator_period_ms,
        detector_period_ms=args.detector_period_ms,
        increase_probability=args.increase_probability,
        max_increment=args.max_increment,
        auto_resolve_on_recovery=args.auto_resolve,
    )
    start_ms = args.start_ms if args.start_ms is not None else clock()
    engine = StagnationEngine(
        default_registry(),
        config=config,
        rng=np.random.default_rng(args.seed),
        start_ms=start_ms,
        alerts=seed_alerts(start_ms) if args.seed_alerts else (),
    )

    actions: Counter[str] = Counter()

    def record(events: tuple[object, ...]) -> None:
        for event in events:
            if isinstance(event, DetectorEvent):
                actions[event.action.value] += 1

    scheduler = TickScheduler()
    engine.attach(scheduler, sink=record)

    if args.realtime:
        ticks = run_realtime(scheduler, duration_s=args.duration_s, clock=clock, sleep=sleep, start_ms=start_ms)
        end_ms = clock()
    else:
        if args.minutes <= 0:
            raise ValueError("--minutes must be > 0")
        end_ms = start_ms + int(args.minutes * 60_000)
        with running(scheduler, start_ms):
            ticks = scheduler.advance_to(end_ms)

    logger.info(
        "monitor finished: %d ticks, %d alerts in store, threshold %d min",
        ticks,
        len(engine.store),
        engine.idle_threshold_minutes,
    )

    report_path: Path | None = None
    if args.report is not None:
        report_path = args.report
        report_path.parent.mkdir(parents=True, exist_ok=True)
        report_path.write_text(
            json.dumps(build_report(engine, now_ms=end_ms, ticks=ticks, actions=actions), indent=2, sort_keys=True),
            encoding="utf-8",
        )

    return MonitorRunResult(
        start_ms=start_ms,
        end_ms=end_ms,
        ticks=ticks,
        detector_actions=tuple(sorted(actions.items())),
        report_path=report_path,
    )


def build_report(
    engine: StagnationEngine,
    *,
    now_ms: int,
    ticks: int,
    actions: Counter[str],
) -> dict[str, Any]:
    """JSON-ready snapshot of the engine state after a run."""
    alerts = engine.store.snapshot()
    production = scope_alerts(alerts, AlertView.PRODUCTION)
    return {
        "config": asdict(engine.config),
        "idle_threshold_minutes": engine.idle_threshold_minutes,
        "now_ms": now_ms,
        "ticks": ticks,
        "detector_actions": dict(sorted(actions.items())),
        "machines": [asdict(row) for row in engine.machine_panel(now_ms)],
        "summary": {
            "production": asdict(summarize_alerts(production)),
            "operations": asdict(summarize_alerts(scope_alerts(alerts, AlertView.OPERATIONS))),
        },
        "alerts": [asdict(alert) for alert in sort_alerts(alerts)],
    }


def main(argv: Sequence[str] | None = None) -> int:
    """CLI entrypoint for the stagnant-production monitor."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.INFO),
        format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
        datefmt="%H:%M:%S",
    )
    try:
        result = run_monitor_from_args(args)
    except Exception as exc:
        print(f"[ERROR] monitor run failed: {exc}", file=sys.stderr)
        return 2

    print(f"ticks: {result.ticks}")
    for action, count in result.detector_actions:
        print(f"{action}: {count}")
    if result.report_path is not None:
        print(f"report: {result.report_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
