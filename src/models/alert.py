"""
Alert event model emitted by the alert controller.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict

ALERT_DANGER = "danger"
ALERT_WARNING = "warning"


@dataclass(frozen=True)
class Alert:
    """
    A proximity alert for the audio/alert sink.

    Attributes:
        level: "danger" or "warning".
        timestamp: Time the alert was raised, in seconds.
        closest_proximity: Proximity value that triggered the alert.
    """
    level: str
    timestamp: float = 0.0
    closest_proximity: float = 0.0

    @property
    def is_danger(self) -> bool:
        return self.level == ALERT_DANGER

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "level": self.level,
            "timestamp": self.timestamp,
            "closest_proximity": self.closest_proximity,
        }
