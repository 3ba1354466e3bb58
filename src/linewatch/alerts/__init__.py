"""Alert store and read-side listing helpers."""

from linewatch.alerts.query import (
    AlertFilter,
    AlertSummary,
    AlertTab,
    AlertView,
    filter_alerts,
    format_time_ago,
    scope_alerts,
    sort_alerts,
    summarize_alerts,
)
from linewatch.alerts.store import AlertStore, DuplicateAlertError

__all__ = [
    "AlertFilter",
    "AlertStore",
    "AlertSummary",
    "AlertTab",
    "AlertView",
    "DuplicateAlertError",
    "filter_alerts",
    "format_time_ago",
    "scope_alerts",
    "sort_alerts",
    "summarize_alerts",
]
