"""Counter simulation, stagnation detection and tick scheduling."""

from linewatch.monitoring.config import (
    DEFAULT_IDLE_THRESHOLD_MINUTES,
    MonitorConfig,
    clamp_live_threshold,
    parse_idle_threshold,
    threshold_ms,
)
from linewatch.monitoring.detector import (
    DetectorAction,
    DetectorEvent,
    StagnationDetector,
    build_stagnant_message,
    stagnant_alert_id,
)
from linewatch.monitoring.engine import MachinePanelRow, StagnationEngine
from linewatch.monitoring.scheduler import PeriodicTask, TickScheduler, run_realtime, running
from linewatch.monitoring.simulator import CounterIncrement, CounterSimulator

__all__ = [
    "DEFAULT_IDLE_THRESHOLD_MINUTES",
    "CounterIncrement",
    "CounterSimulator",
    "DetectorAction",
    "DetectorEvent",
    "MachinePanelRow",
    "MonitorConfig",
    "PeriodicTask",
    "StagnationDetector",
    "StagnationEngine",
    "TickScheduler",
    "build_stagnant_message",
    "clamp_live_threshold",
    "parse_idle_threshold",
    "run_realtime",
    "running",
    "stagnant_alert_id",
    "threshold_ms",
]
