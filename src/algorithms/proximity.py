"""
Proximity classification of a frame's detection set.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from models.detection import Detection
from models.proximity import ProximityLevel, ProximitySummary


@dataclass(frozen=True)
class ProximityClassifierConfig:
    warning_threshold: float = 0.25
    danger_threshold: float = 0.4


class ProximityClassifier:
    """Map a detection set to a proximity level using its closest vehicle."""

    def __init__(self, cfg: ProximityClassifierConfig):
        if not cfg.warning_threshold < cfg.danger_threshold:
            raise ValueError(
                f"warning_threshold ({cfg.warning_threshold}) must be below "
                f"danger_threshold ({cfg.danger_threshold})"
            )
        self.cfg = cfg

    def level_for(self, proximity: float) -> ProximityLevel:
        if proximity > self.cfg.danger_threshold:
            return ProximityLevel.DANGER
        if proximity > self.cfg.warning_threshold:
            return ProximityLevel.WARNING
        return ProximityLevel.SAFE

    def classify(self, detections: Sequence[Detection]) -> ProximitySummary:
        closest = max((d.proximity for d in detections), default=0.0)
        return ProximitySummary(
            level=self.level_for(closest),
            closest_proximity=closest,
            vehicle_count=len(detections),
        )
