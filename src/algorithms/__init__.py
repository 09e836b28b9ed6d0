"""
Detection post-processing and alerting algorithms.

Stages run in this order for every frame:
- YoloDecoder: raw tensor -> class-filtered candidate detections
- non_max_suppression: candidates -> de-duplicated detections
- ProximityClassifier: detections -> proximity level summary
- AlertController: proximity level -> optional alert (cooldown-gated)
"""

from .geometry import area, intersection_area, iou
from .decoder import DecoderConfig, InvalidInputShape, YoloDecoder
from .nms import non_max_suppression
from .proximity import ProximityClassifier, ProximityClassifierConfig
from .alerting import AlertController, AlertControllerConfig

__all__ = [
    "area",
    "intersection_area",
    "iou",
    "DecoderConfig",
    "InvalidInputShape",
    "YoloDecoder",
    "non_max_suppression",
    "ProximityClassifier",
    "ProximityClassifierConfig",
    "AlertController",
    "AlertControllerConfig",
]
