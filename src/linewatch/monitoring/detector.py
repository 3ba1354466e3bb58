"""Stagnant-production rule: active machine, counter not advancing."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import StrEnum
from typing import Iterable, Mapping

from linewatch.alerts.store import AlertStore
from linewatch.domain.models import Alert, AlertCategory, AlertType, ProductionCounterState
from linewatch.monitoring.config import MINUTE_MS, threshold_ms

logger = logging.getLogger(__name__)

STAGNANT_ALERT_PREFIX = "rule-stagnant-production-"


class DetectorAction(StrEnum):
    """Store mutations the detector can perform for one machine."""

    CREATED = "created"
    REOPENED = "reopened"
    REFRESHED = "refreshed"
    RECOVERED = "recovered"


@dataclass(frozen=True, slots=True)
class DetectorEvent:
    """One store mutation produced by a detector tick."""

    action: DetectorAction
    machine_id: str
    alert_id: str
    stagnant_ms: int
    timestamp_ms: int


def stagnant_alert_id(machine_id: str) -> str:
    return f"{STAGNANT_ALERT_PREFIX}{machine_id}"


def stagnant_minutes(stagnant_ms: int) -> int:
    return max(0, stagnant_ms // MINUTE_MS)


def build_stagnant_message(machine_id: str, *, stagnant_ms: int, count: int) -> str:
    label = machine_id.upper()
    return (
        f"Machine {label} is running but production has not increased in "
        f"{stagnant_minutes(stagnant_ms)} min (current counter: {count} units). "
        "Check operation, material supply and logging."
    )


def build_stagnant_title(machine_id: str) -> str:
    return f"No production progress on {machine_id.upper()}"


class StagnationDetector:
    """Create, reopen or refresh one synthetic alert per stagnant machine.

    Machines are evaluated sequentially against the live store, so a later
    machine in the same tick sees earlier machines' insertions. The detector
    never removes alerts. With ``auto_resolve_on_recovery`` enabled, a machine
    that is no longer stagnant has its open alert resolved in place.
    """

    def __init__(self, *, auto_resolve_on_recovery: bool = False) -> None:
        self._auto_resolve_on_recovery = auto_resolve_on_recovery

    def apply_tick(
        self,
        store: AlertStore,
        *,
        now_ms: int,
        machine_ids: Iterable[str],
        counters: Mapping[str, ProductionCounterState],
        idle_threshold_minutes: int,
    ) -> tuple[DetectorEvent, ...]:
        """Evaluate every active machine once and return the mutations made."""
        limit_ms = threshold_ms(idle_threshold_minutes)
        events: list[DetectorEvent] = []

        for machine_id in machine_ids:
            state = counters.get(machine_id)
            last_increase_at_ms = state.last_increase_at_ms if state is not None else now_ms
            count = state.count if state is not None else 0
            stagnant_ms = now_ms - last_increase_at_ms
            alert_id = stagnant_alert_id(machine_id)

            if stagnant_ms < limit_ms:
                if self._auto_resolve_on_recovery:
                    event = self._recover(store, machine_id, alert_id, stagnant_ms, now_ms)
                    if event is not None:
                        events.append(event)
                continue

            message = build_stagnant_message(machine_id, stagnant_ms=stagnant_ms, count=count)
            existing = store.get(alert_id)

            if existing is None:
                store.insert(
                    Alert(
                        id=alert_id,
                        type=AlertType.WARNING,
                        category=AlertCategory.PRODUCTION,
                        title=build_stagnant_title(machine_id),
                        message=message,
                        timestamp_ms=now_ms,
                        is_read=False,
                        machine_id=machine_id,
                        action_required=True,
                    )
                )
                logger.info(
                    "stagnant production on %s: %d min without increase",
                    machine_id,
                    stagnant_minutes(stagnant_ms),
                )
                events.append(DetectorEvent(DetectorAction.CREATED, machine_id, alert_id, stagnant_ms, now_ms))
                continue

            should_reopen = existing.is_read or not existing.action_required
            if not should_reopen and existing.message == message:
                continue

            store.upsert_by_id(
                alert_id,
                lambda alert: replace(
                    alert,
                    message=message,
                    timestamp_ms=now_ms,
                    is_read=False,
                    action_required=True,
                ),
            )
            action = DetectorAction.REOPENED if should_reopen else DetectorAction.REFRESHED
            if action == DetectorAction.REOPENED:
                logger.info("reopened stagnant production alert for %s", machine_id)
            events.append(DetectorEvent(action, machine_id, alert_id, stagnant_ms, now_ms))

        return tuple(events)

    @staticmethod
    def _recover(
        store: AlertStore,
        machine_id: str,
        alert_id: str,
        stagnant_ms: int,
        now_ms: int,
    ) -> DetectorEvent | None:
        existing = store.get(alert_id)
        if existing is None or not existing.action_required:
            return None
        store.resolve(alert_id)
        logger.info("production resumed on %s; resolved %s", machine_id, alert_id)
        return DetectorEvent(DetectorAction.RECOVERED, machine_id, alert_id, stagnant_ms, now_ms)
