"""
Rectangle geometry helpers.

Shared by the suppressor and by tests that check the suppression invariant.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np

from models.detection import Rect


def area(r: Rect) -> float:
    """Area of a rectangle, clamped to 0 for degenerate rectangles."""
    return r.area


def intersection_area(a: Rect, b: Rect) -> float:
    """Area of the overlap between two rectangles, 0 if they do not overlap."""
    return a.intersection_area(b)


def iou(a: Rect, b: Rect) -> float:
    """
    Intersection-over-Union of two rectangles.

    Returns 0 when the union is empty (both rectangles degenerate).
    """
    inter = a.intersection_area(b)
    union = a.area + b.area - inter
    if union <= 0:
        return 0.0
    return inter / union


def iou_matrix(rects: Sequence[Rect]) -> np.ndarray:
    """
    Pairwise IoU for a list of rectangles.

    Returns:
        Symmetric (N, N) array; the diagonal holds each rect's IoU with itself.
    """
    n = len(rects)
    out = np.zeros((n, n), dtype=float)
    for i in range(n):
        for j in range(i, n):
            out[i, j] = out[j, i] = iou(rects[i], rects[j])
    return out
