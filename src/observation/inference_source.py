"""
Observation source that runs an inference backend over a stream of images.
"""

from __future__ import annotations

import time
from typing import Iterable, Iterator, Optional

import numpy as np

from inference.backend import InferenceBackend
from .base import ObservationSource, ObservationConfig, SourceOutput


class InferenceSource(ObservationSource):
    """
    Wrap an image iterable and an InferenceBackend as an ObservationSource.

    Each image is passed through the backend when it is read, so frames that
    the pipeline never reads are never inferred. Image size is taken from
    the image itself and the timestamp from the moment it was pulled.

    Example:
        source = InferenceSource(ObservationConfig(source_id="cam-01"), frames, backend)
        engine.run(source)
    """

    def __init__(
        self,
        config: ObservationConfig,
        images: Iterable[np.ndarray],
        backend: InferenceBackend,
    ):
        super().__init__(config)
        self._images = images
        self._backend = backend
        self._it: Optional[Iterator[np.ndarray]] = None

    def _open(self) -> None:
        self._it = iter(self._images)

    def _next_output(self) -> Optional[SourceOutput]:
        if self._it is None:
            return None

        image = next(self._it, None)
        if image is None:
            return None

        timestamp = time.time()
        height, width = image.shape[:2]
        return SourceOutput(
            output=self._backend.infer(image),
            image_width=width,
            image_height=height,
            timestamp=timestamp,
        )

    def _close(self) -> None:
        self._it = None
