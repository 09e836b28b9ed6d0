"""
YOLO-style output decoding.

Turns a raw per-anchor detector tensor into candidate vehicle detections in
image-pixel space. The tensor holds, per anchor, [cx, cy, w, h, score_0 ...
score_{C-1}] in model-input coordinates (input_size x input_size).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import numpy as np

from models.detection import Detection, Rect, VEHICLE_CLASSES


class InvalidInputShape(ValueError):
    """Raised when a detector tensor does not match the configured shape."""


@dataclass(frozen=True)
class DecoderConfig:
    """
    Attributes:
        input_size: Side length of the square model input, in pixels.
        num_classes: Number of class scores per anchor.
        num_anchors: Expected anchor count; None accepts any count.
        conf_threshold: Best class score must be strictly above this.
        class_filter: Class id -> label for the classes to keep.
        channels_first: True for (4+C, N) tensors, False for (N, 4+C).
    """
    input_size: int = 640
    num_classes: int = 80
    num_anchors: Optional[int] = 8400
    conf_threshold: float = 0.3
    class_filter: Dict[int, str] = field(default_factory=lambda: dict(VEHICLE_CLASSES))
    channels_first: bool = True


class YoloDecoder:
    """Decode detector output into class-filtered, rescaled detections."""

    def __init__(self, cfg: DecoderConfig):
        if cfg.input_size <= 0:
            raise ValueError(f"input_size must be positive, got {cfg.input_size}")
        if cfg.num_classes <= 0:
            raise ValueError(f"num_classes must be positive, got {cfg.num_classes}")
        self.cfg = cfg
        self._class_ids = np.array(sorted(cfg.class_filter), dtype=np.int64)

    def decode(self, output: np.ndarray, image_width: int, image_height: int) -> List[Detection]:
        """
        Decode one frame's detector output.

        Args:
            output: Detector tensor, optionally with a leading batch axis of 1.
            image_width: Width of the original image in pixels.
            image_height: Height of the original image in pixels.

        Returns:
            Candidate detections in anchor order (may be empty).

        Raises:
            InvalidInputShape: If the tensor shape does not match the config.
            ValueError: If the image dimensions are not positive.
        """
        if image_width <= 0 or image_height <= 0:
            raise ValueError(f"Invalid image size {image_width}x{image_height}")

        preds = self._as_anchor_rows(output)
        if len(preds) == 0:
            return []

        # NaN scores never win the class argmax
        scores = np.where(np.isnan(preds[:, 4:]), -np.inf, preds[:, 4:])
        # argmax returns the first index on ties, so the lowest class id wins
        max_class = np.argmax(scores, axis=1)
        max_conf = scores[np.arange(len(preds)), max_class]

        # Compare at the tensor's own precision so a score equal to the
        # threshold is rejected
        threshold = np.asarray(self.cfg.conf_threshold, dtype=scores.dtype)
        keep = (max_conf > threshold) & np.isin(max_class, self._class_ids)
        if not keep.any():
            return []

        boxes = preds[keep, :4].astype(np.float64)
        classes = max_class[keep]
        confs = max_conf[keep]

        scale_x = image_width / self.cfg.input_size
        scale_y = image_height / self.cfg.input_size
        cx, cy, w, h = boxes[:, 0], boxes[:, 1], boxes[:, 2], boxes[:, 3]
        left = np.clip((cx - w / 2) * scale_x, 0, image_width)
        top = np.clip((cy - h / 2) * scale_y, 0, image_height)
        right = np.clip((cx + w / 2) * scale_x, 0, image_width)
        bottom = np.clip((cy + h / 2) * scale_y, 0, image_height)

        detections: List[Detection] = []
        for i in range(len(boxes)):
            class_id = int(classes[i])
            rect = Rect(
                left=float(left[i]),
                top=float(top[i]),
                right=float(right[i]),
                bottom=float(bottom[i]),
            )
            detections.append(
                Detection(
                    rect=rect,
                    class_id=class_id,
                    label=self.cfg.class_filter[class_id],
                    confidence=float(confs[i]),
                    proximity=(rect.bottom - rect.top) / image_height,
                )
            )

        logging.debug(f"Decoded {len(detections)} candidates from {len(preds)} anchors")
        return detections

    def _as_anchor_rows(self, output: np.ndarray) -> np.ndarray:
        """Validate the tensor and return it as (num_anchors, 4 + num_classes)."""
        arr = np.asarray(output)
        if arr.ndim == 3 and arr.shape[0] == 1:
            arr = arr[0]
        if arr.ndim != 2:
            raise InvalidInputShape(f"Expected a 2-D detector tensor, got shape {np.shape(output)}")

        rows = arr.T if self.cfg.channels_first else arr
        expected_values = 4 + self.cfg.num_classes
        if rows.shape[1] != expected_values:
            raise InvalidInputShape(
                f"Expected {expected_values} values per anchor, got shape {np.shape(output)}"
            )
        if self.cfg.num_anchors is not None and rows.shape[0] != self.cfg.num_anchors:
            raise InvalidInputShape(
                f"Expected {self.cfg.num_anchors} anchors, got shape {np.shape(output)}"
            )
        if not np.issubdtype(rows.dtype, np.floating):
            rows = rows.astype(np.float32)
        return rows
