"""
Greedy non-maximum suppression.

Class-agnostic: overlapping boxes are suppressed even when their classes
differ, so one vehicle seen as both "car" and "truck" yields one detection.
"""

from __future__ import annotations

from typing import List, Sequence

from models.detection import Detection

from .geometry import iou


def non_max_suppression(detections: Sequence[Detection], iou_threshold: float) -> List[Detection]:
    """
    Suppress overlapping detections, keeping the most confident ones.

    Args:
        detections: Candidate detections in any order.
        iou_threshold: A candidate is dropped if its IoU with an already
                       accepted detection exceeds this value.

    Returns:
        Accepted detections in acceptance (confidence-descending) order.
        No two returned detections have IoU above iou_threshold.
    """
    # sorted() is stable, so equal confidences keep their input order
    ordered = sorted(detections, key=lambda d: d.confidence, reverse=True)
    selected: List[Detection] = []

    for det in ordered:
        if all(iou(det.rect, kept.rect) <= iou_threshold for kept in selected):
            selected.append(det)

    return selected
