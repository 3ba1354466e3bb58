"""Read-side helpers for listing, filtering and summarizing alerts."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Iterable, Sequence

from linewatch.domain.models import Alert, AlertCategory, AlertType


class AlertView(StrEnum):
    """Top-level split between production monitoring and plant operations."""

    PRODUCTION = "production"
    OPERATIONS = "operations"


class AlertTab(StrEnum):
    ALL = "all"
    UNREAD = "unread"
    ACTION = "action"


@dataclass(frozen=True, slots=True)
class AlertFilter:
    """Operator-selected listing filters. ``None`` means no restriction."""

    view: AlertView = AlertView.PRODUCTION
    tab: AlertTab = AlertTab.ALL
    type: AlertType | None = None
    category: AlertCategory | None = None
    search: str = ""


@dataclass(frozen=True, slots=True)
class AlertSummary:
    """Counters shown above the alert list."""

    unread: int
    action_required: int
    errors: int
    warnings: int


def scope_alerts(alerts: Iterable[Alert], view: AlertView) -> tuple[Alert, ...]:
    if view == AlertView.PRODUCTION:
        return tuple(alert for alert in alerts if alert.category == AlertCategory.PRODUCTION)
    return tuple(alert for alert in alerts if alert.category != AlertCategory.PRODUCTION)


def filter_alerts(alerts: Iterable[Alert], criteria: AlertFilter) -> tuple[Alert, ...]:
    """Apply view scope, tab, type, category and free-text search.

    The category filter only applies to the operations view; the production
    view is already a single category.
    """
    needle = criteria.search.strip().lower()
    selected: list[Alert] = []
    for alert in scope_alerts(alerts, criteria.view):
        if criteria.tab == AlertTab.UNREAD and alert.is_read:
            continue
        if criteria.tab == AlertTab.ACTION and not alert.needs_attention:
            continue
        if criteria.type is not None and alert.type != criteria.type:
            continue
        if (
            criteria.view == AlertView.OPERATIONS
            and criteria.category is not None
            and alert.category != criteria.category
        ):
            continue
        if needle and needle not in alert.title.lower() and needle not in alert.message.lower():
            continue
        selected.append(alert)
    return tuple(selected)


def sort_alerts(alerts: Sequence[Alert]) -> tuple[Alert, ...]:
    """Order by pending action, unread, severity, then newest first."""
    return tuple(
        sorted(
            alerts,
            key=lambda alert: (
                not alert.needs_attention,
                alert.is_read,
                -alert.type.severity_rank,
                -alert.timestamp_ms,
            ),
        )
    )


def summarize_alerts(alerts: Iterable[Alert]) -> AlertSummary:
    unread = [alert for alert in alerts if not alert.is_read]
    return AlertSummary(
        unread=len(unread),
        action_required=sum(1 for alert in unread if alert.action_required),
        errors=sum(1 for alert in unread if alert.type == AlertType.ERROR),
        warnings=sum(1 for alert in unread if alert.type == AlertType.WARNING),
    )


def format_time_ago(timestamp_ms: int, now_ms: int) -> str:
    minutes = (now_ms - timestamp_ms) // 60_000
    if minutes < 1:
        return "just now"
    if minutes < 60:
        return f"{minutes} min ago"
    if minutes < 1_440:
        return f"{minutes // 60} hrs ago"
    return f"{minutes // 1_440} days ago"
