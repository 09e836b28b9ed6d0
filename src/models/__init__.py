"""
Typed models for the vehicle proximity alert core.

Detections, proximity summaries and alerts flow between the pipeline stages;
config models mirror the YAML config structure.
"""

from .detection import Detection, Rect, VEHICLE_CLASSES
from .proximity import ProximityLevel, ProximitySummary
from .alert import Alert, ALERT_DANGER, ALERT_WARNING
from .frame import TensorFrame, FrameResult
from .config import (
    Config,
    ModelConfig,
    DetectionConfig,
    ProximityConfig,
    AlertConfig,
)

__all__ = [
    # Detection
    "Detection",
    "Rect",
    "VEHICLE_CLASSES",
    # Proximity
    "ProximityLevel",
    "ProximitySummary",
    # Alerts
    "Alert",
    "ALERT_DANGER",
    "ALERT_WARNING",
    # Frames
    "TensorFrame",
    "FrameResult",
    # Config
    "Config",
    "ModelConfig",
    "DetectionConfig",
    "ProximityConfig",
    "AlertConfig",
]
