"""Domain models for machines, production counters and alerts."""

from linewatch.domain.models import (
    Alert,
    AlertCategory,
    AlertType,
    Machine,
    MachineStatus,
    ProductionCounterState,
)
from linewatch.domain.registry import MachineRegistry, default_machines, default_registry, seed_alerts

__all__ = [
    "Alert",
    "AlertCategory",
    "AlertType",
    "Machine",
    "MachineRegistry",
    "MachineStatus",
    "ProductionCounterState",
    "default_machines",
    "default_registry",
    "seed_alerts",
]
