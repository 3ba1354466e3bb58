"""Randomized production counters standing in for a telemetry feed."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Mapping

import numpy as np

from linewatch.domain.models import ProductionCounterState


@dataclass(frozen=True, slots=True)
class CounterIncrement:
    """One machine's counter advance during a simulator tick."""

    machine_id: str
    increment: int
    count: int
    timestamp_ms: int


class CounterSimulator:
    """Advance per-machine production counters on each tick.

    Each machine independently produces ``1..max_increment`` units with
    probability ``increase_probability`` and nothing otherwise. Machines that
    produce nothing keep their previous ``last_increase_at_ms``.
    """

    def __init__(
        self,
        machine_ids: Iterable[str],
        *,
        rng: np.random.Generator,
        start_ms: int,
        increase_probability: float = 0.8,
        max_increment: int = 5,
    ) -> None:
        if not 0.0 <= increase_probability <= 1.0:
            raise ValueError("increase_probability must be within [0, 1]")
        if max_increment < 1:
            raise ValueError("max_increment must be >= 1")
        self._rng = rng
        self._increase_probability = increase_probability
        self._max_increment = max_increment
        self._states: dict[str, ProductionCounterState] = {}
        for machine_id in machine_ids:
            self.ensure_machine(machine_id, now_ms=start_ms)

    @property
    def states(self) -> Mapping[str, ProductionCounterState]:
        return dict(self._states)

    def state(self, machine_id: str) -> ProductionCounterState | None:
        return self._states.get(machine_id)

    def ensure_machine(self, machine_id: str, *, now_ms: int) -> ProductionCounterState:
        """Start tracking ``machine_id`` at zero units if it is not tracked yet."""
        existing = self._states.get(machine_id)
        if existing is not None:
            return existing
        state = ProductionCounterState(machine_id=machine_id, count=0, last_increase_at_ms=now_ms)
        self._states[machine_id] = state
        return state

    def apply_tick(self, now_ms: int, machine_ids: Iterable[str]) -> tuple[CounterIncrement, ...]:
        """Draw increments for ``machine_ids`` and return the non-zero ones."""
        events: list[CounterIncrement] = []
        for machine_id in machine_ids:
            state = self.ensure_machine(machine_id, now_ms=now_ms)
            increment = self._draw_increment()
            if increment <= 0:
                continue
            advanced = state.advanced(increment, now_ms=now_ms)
            self._states[machine_id] = advanced
            events.append(
                CounterIncrement(
                    machine_id=machine_id,
                    increment=increment,
                    count=advanced.count,
                    timestamp_ms=now_ms,
                )
            )
        return tuple(events)

    def _draw_increment(self) -> int:
        roll = float(self._rng.random())
        if not roll < self._increase_probability:
            return 0
        increment = int(self._rng.integers(1, self._max_increment + 1))
        return increment if increment > 0 else 0
