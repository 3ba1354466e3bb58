"""Core domain models for linewatch."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class MachineStatus(StrEnum):
    """Operating posture reported by the floor registry."""

    ACTIVE = "active"
    WAITING = "waiting"
    INACTIVE = "inactive"


class AlertType(StrEnum):
    """Alert severity classes."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"
    SUCCESS = "success"

    @property
    def severity_rank(self) -> int:
        """Higher rank sorts first in alert listings."""
        return _SEVERITY_RANK[self]


_SEVERITY_RANK: dict[AlertType, int] = {
    AlertType.ERROR: 4,
    AlertType.WARNING: 3,
    AlertType.INFO: 2,
    AlertType.SUCCESS: 1,
}


class AlertCategory(StrEnum):
    """Functional area an alert belongs to."""

    MACHINE = "machine"
    PRODUCTION = "production"
    MAINTENANCE = "maintenance"
    EMPLOYEE = "employee"
    SYSTEM = "system"


@dataclass(frozen=True, slots=True)
class Machine:
    """One machine on the production floor."""

    id: str
    name: str
    status: MachineStatus

    def __post_init__(self) -> None:
        if not self.id.strip():
            raise ValueError("machine id must not be empty")

    @property
    def label(self) -> str:
        return self.id.upper()

    @property
    def is_active(self) -> bool:
        return self.status == MachineStatus.ACTIVE


@dataclass(frozen=True, slots=True)
class Alert:
    """Alert record shared by manual and rule-generated entries."""

    id: str
    type: AlertType
    category: AlertCategory
    title: str
    message: str
    timestamp_ms: int
    is_read: bool = False
    machine_id: str | None = None
    employee_id: str | None = None
    action_required: bool = False

    def __post_init__(self) -> None:
        if not self.id.strip():
            raise ValueError("alert id must not be empty")
        if self.timestamp_ms < 0:
            raise ValueError("timestamp_ms must be >= 0")

    @property
    def needs_attention(self) -> bool:
        """Unread and still waiting on an operator action."""
        return self.action_required and not self.is_read


@dataclass(frozen=True, slots=True)
class ProductionCounterState:
    """Cumulative production counter for one machine."""

    machine_id: str
    count: int
    last_increase_at_ms: int

    def __post_init__(self) -> None:
        if self.count < 0:
            raise ValueError("count must be >= 0")

    def advanced(self, increment: int, *, now_ms: int) -> ProductionCounterState:
        """Return the state after ``increment`` units; zero leaves it untouched."""
        if increment < 0:
            raise ValueError("increment must be >= 0")
        if increment == 0:
            return self
        return ProductionCounterState(
            machine_id=self.machine_id,
            count=self.count + increment,
            last_increase_at_ms=now_ms,
        )
