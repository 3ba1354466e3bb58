"""Ordered in-memory alert store shared by the detector and operators."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable, Iterable, Iterator

from linewatch.domain.models import Alert

logger = logging.getLogger(__name__)


class DuplicateAlertError(ValueError):
    """Raised when an alert id is already present in the store."""


class AlertStore:
    """Single source of truth for manual and rule-generated alerts.

    Order is significant: new alerts are prepended and in-place updates keep
    their position. Alert ids are unique across both writers.
    """

    def __init__(self, alerts: Iterable[Alert] = ()) -> None:
        self._alerts: list[Alert] = []
        for alert in alerts:
            if self._index_of(alert.id) != -1:
                raise DuplicateAlertError(f"duplicate alert id: {alert.id}")
            self._alerts.append(alert)

    def __len__(self) -> int:
        return len(self._alerts)

    def __iter__(self) -> Iterator[Alert]:
        return iter(tuple(self._alerts))

    def __contains__(self, alert_id: object) -> bool:
        return isinstance(alert_id, str) and self._index_of(alert_id) != -1

    def snapshot(self) -> tuple[Alert, ...]:
        """Return the full ordered list as an immutable tuple."""
        return tuple(self._alerts)

    def get(self, alert_id: str) -> Alert | None:
        index = self._index_of(alert_id)
        return None if index == -1 else self._alerts[index]

    def insert(self, alert: Alert) -> None:
        """Prepend ``alert``; ids must be unique."""
        if self._index_of(alert.id) != -1:
            raise DuplicateAlertError(f"duplicate alert id: {alert.id}")
        self._alerts.insert(0, alert)

    def upsert_by_id(self, alert_id: str, updater: Callable[[Alert], Alert]) -> Alert | None:
        """Replace the alert with ``alert_id`` in place.

        Returns the updated alert, or ``None`` when no alert has that id.
        The updater must preserve the id.
        """
        index = self._index_of(alert_id)
        if index == -1:
            return None
        updated = updater(self._alerts[index])
        if updated.id != alert_id:
            raise ValueError(f"updater changed alert id from {alert_id} to {updated.id}")
        self._alerts[index] = updated
        return updated

    def mark_read(self, alert_id: str) -> bool:
        return self.upsert_by_id(alert_id, lambda alert: replace(alert, is_read=True)) is not None

    def mark_all_read(self) -> int:
        """Mark every alert read; returns how many were unread."""
        changed = sum(1 for alert in self._alerts if not alert.is_read)
        self._alerts = [alert if alert.is_read else replace(alert, is_read=True) for alert in self._alerts]
        return changed

    def resolve(self, alert_id: str) -> bool:
        """Mark read and clear the action-required flag."""
        resolved = self.upsert_by_id(
            alert_id,
            lambda alert: replace(alert, is_read=True, action_required=False),
        )
        return resolved is not None

    def dismiss(self, alert_id: str) -> bool:
        index = self._index_of(alert_id)
        if index == -1:
            return False
        del self._alerts[index]
        logger.debug("dismissed alert %s", alert_id)
        return True

    def clear_read(self) -> int:
        """Remove every read alert; returns the number removed."""
        before = len(self._alerts)
        self._alerts = [alert for alert in self._alerts if not alert.is_read]
        removed = before - len(self._alerts)
        if removed:
            logger.debug("cleared %d read alerts", removed)
        return removed

    def _index_of(self, alert_id: str) -> int:
        for index, alert in enumerate(self._alerts):
            if alert.id == alert_id:
                return index
        return -1
