"""
Frame models: detector output going into the pipeline and the per-frame result
coming out of it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import numpy as np

from .alert import Alert
from .detection import Detection
from .proximity import ProximitySummary


@dataclass
class TensorFrame:
    """
    Raw detector output for one captured frame.

    Attributes:
        output: Detector output tensor in model space.
        image_width: Width of the original image in pixels.
        image_height: Height of the original image in pixels.
        timestamp: Unix timestamp when the frame was captured.
        frame_index: Sequential frame number since start.
        source: Identifier for the source that produced the frame.
    """
    output: np.ndarray
    image_width: int
    image_height: int
    timestamp: float
    frame_index: int = 0
    source: Optional[str] = None

    @property
    def size(self) -> Tuple[int, int]:
        """Return (width, height)."""
        return (self.image_width, self.image_height)


@dataclass(frozen=True)
class FrameResult:
    """
    Outcome of running one frame through the pipeline.

    Attributes:
        detections: Final detections, confidence-descending.
        summary: Vehicle count, closest proximity and level.
        alert: Alert raised for this frame, if any.
        timestamp: Frame timestamp used for alert evaluation.
        frame_index: Sequential frame number.
    """
    detections: List[Detection] = field(default_factory=list)
    summary: Optional[ProximitySummary] = None
    alert: Optional[Alert] = None
    timestamp: float = 0.0
    frame_index: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "frame_index": self.frame_index,
            "timestamp": self.timestamp,
            "detections": [d.to_dict() for d in self.detections],
            "summary": self.summary.to_dict() if self.summary else None,
            "alert": self.alert.to_dict() if self.alert else None,
        }
