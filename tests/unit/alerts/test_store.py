"""Unit tests for the ordered alert store."""

from __future__ import annotations

from dataclasses import replace

import pytest

from linewatch.alerts import AlertStore, DuplicateAlertError
from linewatch.domain import Alert, AlertCategory, AlertType


def _alert(alert_id: str, *, is_read: bool = False, action_required: bool = True, ts_ms: int = 0) -> Alert:
    return Alert(
        id=alert_id,
        type=AlertType.WARNING,
        category=AlertCategory.PRODUCTION,
        title=f"title {alert_id}",
        message=f"message {alert_id}",
        timestamp_ms=ts_ms,
        is_read=is_read,
        action_required=action_required,
    )


def test_insert_prepends() -> None:
    store = AlertStore([_alert("a"), _alert("b")])

    store.insert(_alert("c"))

    assert [alert.id for alert in store] == ["c", "a", "b"]


def test_insert_rejects_duplicate_id() -> None:
    store = AlertStore([_alert("a")])

    with pytest.raises(DuplicateAlertError, match="duplicate alert id"):
        store.insert(_alert("a"))


def test_constructor_rejects_duplicate_ids() -> None:
    with pytest.raises(ValueError, match="duplicate alert id"):
        AlertStore([_alert("a"), _alert("a")])


def test_upsert_replaces_in_place() -> None:
    store = AlertStore([_alert("a"), _alert("b"), _alert("c")])

    updated = store.upsert_by_id("b", lambda alert: replace(alert, message="changed"))

    assert updated is not None
    assert [alert.id for alert in store] == ["a", "b", "c"]
    assert store.get("b").message == "changed"


def test_upsert_missing_returns_none() -> None:
    store = AlertStore([_alert("a")])

    assert store.upsert_by_id("zzz", lambda alert: alert) is None
    assert store.snapshot() == (_alert("a"),)


def test_upsert_rejects_id_change() -> None:
    store = AlertStore([_alert("a")])

    with pytest.raises(ValueError, match="changed alert id"):
        store.upsert_by_id("a", lambda alert: replace(alert, id="b"))


def test_mark_read_and_mark_all_read() -> None:
    store = AlertStore([_alert("a"), _alert("b"), _alert("c", is_read=True)])

    assert store.mark_read("a") is True
    assert store.mark_read("missing") is False
    assert store.get("a").is_read is True

    assert store.mark_all_read() == 1
    assert all(alert.is_read for alert in store)


def test_resolve_clears_action_required() -> None:
    store = AlertStore([_alert("a")])

    assert store.resolve("a") is True

    resolved = store.get("a")
    assert resolved.is_read is True
    assert resolved.action_required is False


def test_dismiss_removes_by_id() -> None:
    store = AlertStore([_alert("a"), _alert("b")])

    assert store.dismiss("a") is True
    assert store.dismiss("a") is False
    assert "a" not in store
    assert len(store) == 1


def test_clear_read_removes_only_read_alerts() -> None:
    store = AlertStore([_alert("a", is_read=True), _alert("b"), _alert("c", is_read=True)])

    removed = store.clear_read()

    assert removed == 2
    assert [alert.id for alert in store] == ["b"]


def test_snapshot_is_detached_from_later_mutations() -> None:
    store = AlertStore([_alert("a")])
    before = store.snapshot()

    store.insert(_alert("b"))

    assert [alert.id for alert in before] == ["a"]
