"""
Detection models for decoded detector output.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Tuple


# COCO class ids treated as vehicles
VEHICLE_CLASSES: Mapping[int, str] = {
    2: "car",
    3: "motorcycle",
    5: "bus",
    7: "truck",
}


@dataclass(frozen=True)
class Rect:
    """
    An axis-aligned rectangle in image-pixel coordinates.

    Attributes:
        left: Left edge x coordinate.
        top: Top edge y coordinate.
        right: Right edge x coordinate.
        bottom: Bottom edge y coordinate.
    """
    left: float
    top: float
    right: float
    bottom: float

    @property
    def width(self) -> float:
        return self.right - self.left

    @property
    def height(self) -> float:
        return self.bottom - self.top

    @property
    def area(self) -> float:
        """Area of the rectangle; degenerate rectangles have area 0."""
        return max(0.0, self.width) * max(0.0, self.height)

    def intersection_area(self, other: "Rect") -> float:
        """Area of the overlap with another rectangle, 0 if they do not overlap."""
        width = min(self.right, other.right) - max(self.left, other.left)
        height = min(self.bottom, other.bottom) - max(self.top, other.top)
        if width <= 0 or height <= 0:
            return 0.0
        return width * height

    def as_tuple(self) -> Tuple[float, float, float, float]:
        """Return as (left, top, right, bottom) tuple."""
        return (self.left, self.top, self.right, self.bottom)


@dataclass(frozen=True)
class Detection:
    """
    A single vehicle detection within one frame.

    Attributes:
        rect: Bounding box in image-pixel coordinates.
        class_id: Detector class id.
        label: Human-readable class label from the class filter.
        confidence: Best class score (0-1].
        proximity: Box height as a fraction of image height (0-1).
    """
    rect: Rect
    class_id: int
    label: str
    confidence: float
    proximity: float

    @property
    def area(self) -> float:
        return self.rect.area

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "rect": list(self.rect.as_tuple()),
            "class_id": self.class_id,
            "label": self.label,
            "confidence": self.confidence,
            "proximity": self.proximity,
        }
