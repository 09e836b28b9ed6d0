"""
Inference backend interface.

The detection model itself is provided by the host platform (TFLite, ONNX,
an accelerator runtime, ...). Backends take an image and return the model's
raw output tensor; decoding happens in algorithms.decoder.
"""

from __future__ import annotations

from typing import Protocol

import numpy as np


class InferenceBackend(Protocol):
    def infer(self, image: np.ndarray) -> np.ndarray:
        """
        Run the model on one image.

        Args:
            image: Image as an (H, W, C) array in original resolution.

        Returns:
            Raw detector output, e.g. shape (1, 84, 8400) for YOLOv8 on COCO.
        """
        ...
