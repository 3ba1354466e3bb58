"""Runtime configuration for counter simulation and stagnation detection."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from math import floor, isfinite

logger = logging.getLogger(__name__)

DEFAULT_IDLE_THRESHOLD_MINUTES = 10
MIN_IDLE_THRESHOLD_MINUTES = 1
MINUTE_MS = 60_000


@dataclass(frozen=True, slots=True)
class MonitorConfig:
    """Tick periods, simulation odds and the startup idle threshold."""

    idle_threshold_minutes: int = DEFAULT_IDLE_THRESHOLD_MINUTES
    simulator_period_ms: int = 12_000
    detector_period_ms: int = 3_000
    increase_probability: float = 0.8
    max_increment: int = 5
    auto_resolve_on_recovery: bool = False

    def __post_init__(self) -> None:
        if self.idle_threshold_minutes < MIN_IDLE_THRESHOLD_MINUTES:
            raise ValueError("idle_threshold_minutes must be >= 1")
        if self.simulator_period_ms <= 0:
            raise ValueError("simulator_period_ms must be > 0")
        if self.detector_period_ms <= 0:
            raise ValueError("detector_period_ms must be > 0")
        if not 0.0 <= self.increase_probability <= 1.0:
            raise ValueError("increase_probability must be within [0, 1]")
        if self.max_increment < 1:
            raise ValueError("max_increment must be >= 1")


def parse_idle_threshold(raw: object, *, default: int = DEFAULT_IDLE_THRESHOLD_MINUTES) -> int:
    """Resolve the startup threshold from an external parameter.

    Anything that is not a finite number above zero falls back to ``default``.
    Valid values are rounded half-up to whole minutes.
    """
    value = _to_number(raw)
    if not isfinite(value) or value <= 0:
        if raw is not None:
            logger.warning("ignoring invalid idle threshold %r; using %d min", raw, default)
        return default
    return max(MIN_IDLE_THRESHOLD_MINUTES, _round_half_up(value))


def clamp_live_threshold(raw: object) -> int:
    """Resolve an operator-edited threshold; never rejects, clamps to >= 1.

    Fractional input is rounded half-up to whole minutes, so ``"1.4"`` gives
    1 and ``"1.5"`` gives 2.
    """
    value = _to_number(raw)
    if not isfinite(value) or value == 0:
        return MIN_IDLE_THRESHOLD_MINUTES
    return max(MIN_IDLE_THRESHOLD_MINUTES, _round_half_up(value))


def threshold_ms(idle_threshold_minutes: int) -> int:
    return max(MIN_IDLE_THRESHOLD_MINUTES, idle_threshold_minutes) * MINUTE_MS


def _to_number(raw: object) -> float:
    if raw is None or isinstance(raw, bool):
        return float("nan")
    if isinstance(raw, str):
        raw = raw.strip()
        if not raw:
            return float("nan")
    try:
        return float(raw)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return float("nan")


def _round_half_up(value: float) -> int:
    return int(floor(value + 0.5))
