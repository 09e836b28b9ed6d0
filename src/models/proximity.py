"""
Proximity level and per-frame summary models.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict


class ProximityLevel(str, Enum):
    """Discrete proximity levels, ordered SAFE < WARNING < DANGER."""
    SAFE = "safe"
    WARNING = "warning"
    DANGER = "danger"

    @property
    def severity(self) -> int:
        return _SEVERITY[self]

    def __lt__(self, other):
        if not isinstance(other, ProximityLevel):
            return NotImplemented
        return self.severity < other.severity

    def __le__(self, other):
        if not isinstance(other, ProximityLevel):
            return NotImplemented
        return self.severity <= other.severity

    def __gt__(self, other):
        if not isinstance(other, ProximityLevel):
            return NotImplemented
        return self.severity > other.severity

    def __ge__(self, other):
        if not isinstance(other, ProximityLevel):
            return NotImplemented
        return self.severity >= other.severity


_SEVERITY = {
    ProximityLevel.SAFE: 0,
    ProximityLevel.WARNING: 1,
    ProximityLevel.DANGER: 2,
}


@dataclass(frozen=True)
class ProximitySummary:
    """
    Proximity classification of one frame's detection set.

    Attributes:
        level: Proximity level of the closest vehicle.
        closest_proximity: Largest proximity value in the set (0 if empty).
        vehicle_count: Number of detections in the set.
    """
    level: ProximityLevel
    closest_proximity: float
    vehicle_count: int

    @property
    def has_vehicles(self) -> bool:
        return self.vehicle_count > 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "level": self.level.value,
            "closest_proximity": self.closest_proximity,
            "vehicle_count": self.vehicle_count,
        }
