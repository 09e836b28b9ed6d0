"""
Typed configuration models matching the YAML config structure.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .alert import ALERT_DANGER, ALERT_WARNING
from .detection import VEHICLE_CLASSES


def _default_phrases() -> Dict[str, str]:
    return {
        ALERT_DANGER: "Danger! Car very close!",
        ALERT_WARNING: "Warning! Car approaching",
    }


@dataclass
class ModelConfig:
    """Shape of the detector output tensor."""
    input_size: int = 640
    num_classes: int = 80
    num_anchors: Optional[int] = 8400
    channels_first: bool = True

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ModelConfig":
        num_anchors = d.get("num_anchors", 8400)
        return cls(
            input_size=int(d.get("input_size", 640)),
            num_classes=int(d.get("num_classes", 80)),
            num_anchors=int(num_anchors) if num_anchors is not None else None,
            channels_first=bool(d.get("channels_first", True)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "input_size": self.input_size,
            "num_classes": self.num_classes,
            "num_anchors": self.num_anchors,
            "channels_first": self.channels_first,
        }


@dataclass
class DetectionConfig:
    """Decoding and suppression configuration."""
    conf_threshold: float = 0.3
    iou_threshold: float = 0.45
    classes: Dict[int, str] = field(default_factory=lambda: dict(VEHICLE_CLASSES))

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "DetectionConfig":
        classes = d.get("classes")
        return cls(
            conf_threshold=float(d.get("conf_threshold", 0.3)),
            iou_threshold=float(d.get("iou_threshold", 0.45)),
            classes=(
                {int(k): str(v) for k, v in classes.items()}
                if classes
                else dict(VEHICLE_CLASSES)
            ),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "conf_threshold": self.conf_threshold,
            "iou_threshold": self.iou_threshold,
            "classes": dict(self.classes),
        }


@dataclass
class ProximityConfig:
    """Proximity level cut points."""
    warning_threshold: float = 0.25
    danger_threshold: float = 0.4

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ProximityConfig":
        return cls(
            warning_threshold=float(d.get("warning_threshold", 0.25)),
            danger_threshold=float(d.get("danger_threshold", 0.4)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "warning_threshold": self.warning_threshold,
            "danger_threshold": self.danger_threshold,
        }


@dataclass
class AlertConfig:
    """Alert cooldown and the phrases spoken for each alert level."""
    cooldown_s: float = 2.0
    phrases: Dict[str, str] = field(default_factory=_default_phrases)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "AlertConfig":
        phrases = _default_phrases()
        phrases.update(d.get("phrases") or {})
        return cls(
            cooldown_s=float(d.get("cooldown_s", 2.0)),
            phrases=phrases,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "cooldown_s": self.cooldown_s,
            "phrases": dict(self.phrases),
        }


@dataclass
class Config:
    """
    Complete application configuration.

    This is a typed representation of the YAML config structure.
    """
    model: ModelConfig = field(default_factory=ModelConfig)
    detection: DetectionConfig = field(default_factory=DetectionConfig)
    proximity: ProximityConfig = field(default_factory=ProximityConfig)
    alert: AlertConfig = field(default_factory=AlertConfig)
    log_path: str = "logs/proximity_alert.log"
    log_level: str = "INFO"

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Config":
        """Adapter: Create Config from raw dictionary (e.g., from load_config)."""
        return cls(
            model=ModelConfig.from_dict(d.get("model") or {}),
            detection=DetectionConfig.from_dict(d.get("detection") or {}),
            proximity=ProximityConfig.from_dict(d.get("proximity") or {}),
            alert=AlertConfig.from_dict(d.get("alert") or {}),
            log_path=d.get("log_path", "logs/proximity_alert.log"),
            log_level=d.get("log_level", "INFO"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert back to dictionary (for saving or passing to existing code)."""
        return {
            "model": self.model.to_dict(),
            "detection": self.detection.to_dict(),
            "proximity": self.proximity.to_dict(),
            "alert": self.alert.to_dict(),
            "log_path": self.log_path,
            "log_level": self.log_level,
        }
