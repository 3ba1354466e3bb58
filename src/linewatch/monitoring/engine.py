"""Stagnation engine: owns counters, alerts and the live idle threshold."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Iterable

import numpy as np

from linewatch.alerts.store import AlertStore
from linewatch.domain.models import Alert
from linewatch.domain.registry import MachineRegistry
from linewatch.monitoring.config import MonitorConfig, clamp_live_threshold
from linewatch.monitoring.detector import DetectorEvent, StagnationDetector, stagnant_minutes
from linewatch.monitoring.scheduler import PeriodicTask, TickScheduler
from linewatch.monitoring.simulator import CounterIncrement, CounterSimulator

logger = logging.getLogger(__name__)

EventSink = Callable[[tuple[object, ...]], None]


@dataclass(frozen=True, slots=True)
class MachinePanelRow:
    """Per-machine production status row for the monitoring panel."""

    machine_id: str
    name: str
    minutes_idle: int
    over_threshold: bool
    count: int


class StagnationEngine:
    """Explicit state owner for the simulator, detector and alert store.

    Both tick handlers are synchronous transitions over in-memory state and
    return the events they produced, so ordering and idempotence can be
    checked without timers.
    """

    def __init__(
        self,
        registry: MachineRegistry,
        *,
        config: MonitorConfig | None = None,
        rng: np.random.Generator | None = None,
        start_ms: int,
        alerts: Iterable[Alert] = (),
    ) -> None:
        self._registry = registry
        self._config = config if config is not None else MonitorConfig()
        self._idle_threshold_minutes = self._config.idle_threshold_minutes
        self._store = AlertStore(alerts)
        self._simulator = CounterSimulator(
            (machine.id for machine in registry),
            rng=rng if rng is not None else np.random.default_rng(),
            start_ms=start_ms,
            increase_probability=self._config.increase_probability,
            max_increment=self._config.max_increment,
        )
        self._detector = StagnationDetector(
            auto_resolve_on_recovery=self._config.auto_resolve_on_recovery,
        )

    @property
    def config(self) -> MonitorConfig:
        return self._config

    @property
    def registry(self) -> MachineRegistry:
        return self._registry

    @property
    def store(self) -> AlertStore:
        return self._store

    @property
    def simulator(self) -> CounterSimulator:
        return self._simulator

    @property
    def idle_threshold_minutes(self) -> int:
        return self._idle_threshold_minutes

    def set_idle_threshold(self, raw: object) -> int:
        """Apply an operator edit; takes effect on the next detector tick."""
        value = clamp_live_threshold(raw)
        if value != self._idle_threshold_minutes:
            logger.info("idle threshold changed from %d to %d min", self._idle_threshold_minutes, value)
        self._idle_threshold_minutes = value
        return value

    def apply_simulator_tick(self, now_ms: int) -> tuple[CounterIncrement, ...]:
        return self._simulator.apply_tick(now_ms, self._registry.active_ids())

    def apply_detector_tick(self, now_ms: int) -> tuple[DetectorEvent, ...]:
        return self._detector.apply_tick(
            self._store,
            now_ms=now_ms,
            machine_ids=self._registry.active_ids(),
            counters=self._simulator.states,
            idle_threshold_minutes=self._idle_threshold_minutes,
        )

    def machine_panel(self, now_ms: int) -> tuple[MachinePanelRow, ...]:
        """Minutes since last increase and counter value for each active machine."""
        rows: list[MachinePanelRow] = []
        for machine in self._registry.active():
            state = self._simulator.state(machine.id)
            last_increase_at_ms = state.last_increase_at_ms if state is not None else now_ms
            minutes = stagnant_minutes(now_ms - last_increase_at_ms)
            rows.append(
                MachinePanelRow(
                    machine_id=machine.id,
                    name=machine.name,
                    minutes_idle=minutes,
                    over_threshold=minutes >= self._idle_threshold_minutes,
                    count=state.count if state is not None else 0,
                )
            )
        return tuple(rows)

    def attach(
        self,
        scheduler: TickScheduler,
        *,
        sink: EventSink | None = None,
    ) -> tuple[PeriodicTask, PeriodicTask]:
        """Register the simulator and detector ticks on ``scheduler``.

        The simulator is registered first so that on coincident ticks the
        detector observes the freshly advanced counters.
        """

        def on_simulator_tick(now_ms: int) -> None:
            events = self.apply_simulator_tick(now_ms)
            if sink is not None and events:
                sink(events)

        def on_detector_tick(now_ms: int) -> None:
            events = self.apply_detector_tick(now_ms)
            if sink is not None and events:
                sink(events)

        simulator_task = scheduler.add("counter-simulator", self._config.simulator_period_ms, on_simulator_tick)
        detector_task = scheduler.add("stagnation-detector", self._config.detector_period_ms, on_detector_tick)
        return simulator_task, detector_task
