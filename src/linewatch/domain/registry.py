"""Machine registry and seeded reference alerts for the floor."""

from __future__ import annotations

from typing import Iterable, Iterator

from linewatch.domain.models import Alert, AlertCategory, AlertType, Machine, MachineStatus

_MINUTE_MS = 60_000

_FLOOR_MACHINES: tuple[tuple[str, MachineStatus], ...] = (
    ("m1", MachineStatus.ACTIVE),
    ("m2", MachineStatus.ACTIVE),
    ("m3", MachineStatus.INACTIVE),
    ("m4", MachineStatus.WAITING),
    ("m5", MachineStatus.ACTIVE),
    ("m6", MachineStatus.ACTIVE),
    ("m7", MachineStatus.ACTIVE),
    ("m8", MachineStatus.INACTIVE),
    ("m11", MachineStatus.WAITING),
    ("m12", MachineStatus.WAITING),
    ("m13", MachineStatus.ACTIVE),
    ("m14", MachineStatus.INACTIVE),
    ("m15", MachineStatus.ACTIVE),
    ("m16", MachineStatus.WAITING),
    ("m17", MachineStatus.INACTIVE),
    ("m18", MachineStatus.ACTIVE),
    ("m19", MachineStatus.ACTIVE),
    ("m20", MachineStatus.ACTIVE),
    ("m21", MachineStatus.WAITING),
    ("m22", MachineStatus.ACTIVE),
)


class MachineRegistry:
    """Read-only, ordered view over the machines on the floor."""

    def __init__(self, machines: Iterable[Machine]) -> None:
        self._machines = tuple(machines)
        ids = [machine.id for machine in self._machines]
        duplicates = sorted({machine_id for machine_id in ids if ids.count(machine_id) > 1})
        if duplicates:
            raise ValueError(f"duplicate machine ids in registry: {', '.join(duplicates)}")
        self._by_id = {machine.id: machine for machine in self._machines}

    def __iter__(self) -> Iterator[Machine]:
        return iter(self._machines)

    def __len__(self) -> int:
        return len(self._machines)

    def get(self, machine_id: str) -> Machine | None:
        return self._by_id.get(machine_id)

    def active(self) -> tuple[Machine, ...]:
        return tuple(machine for machine in self._machines if machine.is_active)

    def active_ids(self) -> tuple[str, ...]:
        """Active machine ids in registry order."""
        return tuple(machine.id for machine in self.active())


def default_machines() -> tuple[Machine, ...]:
    """Return the reference floor layout."""
    return tuple(
        Machine(id=machine_id, name=machine_id.upper(), status=status)
        for machine_id, status in _FLOOR_MACHINES
    )


def default_registry() -> MachineRegistry:
    return MachineRegistry(default_machines())


def _ago(now_ms: int, minutes: int) -> int:
    return max(0, now_ms - minutes * _MINUTE_MS)


def seed_alerts(now_ms: int) -> tuple[Alert, ...]:
    """Manually-authored alerts present when a session starts."""
    return (
        Alert(
            id="a1",
            type=AlertType.ERROR,
            category=AlertCategory.MACHINE,
            title="Machine M3 stopped",
            message="Machine M3 stopped unexpectedly. Immediate inspection required.",
            timestamp_ms=_ago(now_ms, 5),
            is_read=False,
            machine_id="m3",
            action_required=True,
        ),
        Alert(
            id="a2",
            type=AlertType.WARNING,
            category=AlertCategory.PRODUCTION,
            title="Low output on M4",
            message="Machine M4 is running at 65% of its normal capacity.",
            timestamp_ms=_ago(now_ms, 15),
            is_read=False,
            machine_id="m4",
            action_required=True,
        ),
        Alert(
            id="a3",
            type=AlertType.INFO,
            category=AlertCategory.MAINTENANCE,
            title="Scheduled maintenance",
            message="Preventive maintenance for M8 is scheduled for tomorrow at 10:00.",
            timestamp_ms=_ago(now_ms, 30),
            is_read=True,
            machine_id="m8",
            action_required=False,
        ),
        Alert(
            id="a4",
            type=AlertType.SUCCESS,
            category=AlertCategory.PRODUCTION,
            title="Daily target reached",
            message="The production line reached its daily target of 3,000 units.",
            timestamp_ms=_ago(now_ms, 60),
            is_read=True,
            action_required=False,
        ),
        Alert(
            id="a5",
            type=AlertType.ERROR,
            category=AlertCategory.MACHINE,
            title="Sensor fault on M14",
            message="The temperature sensor on M14 is reporting inconsistent readings.",
            timestamp_ms=_ago(now_ms, 90),
            is_read=False,
            machine_id="m14",
            action_required=True,
        ),
        Alert(
            id="a6",
            type=AlertType.INFO,
            category=AlertCategory.SYSTEM,
            title="System update",
            message="A new system update is available. Version 2.5.1",
            timestamp_ms=_ago(now_ms, 120),
            is_read=True,
            action_required=False,
        ),
        Alert(
            id="a7",
            type=AlertType.WARNING,
            category=AlertCategory.MAINTENANCE,
            title="SKU changeover required",
            message="M11 needs an SKU changeover for the next production order.",
            timestamp_ms=_ago(now_ms, 150),
            is_read=False,
            machine_id="m11",
            action_required=True,
        ),
    )
