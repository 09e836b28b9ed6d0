"""
Base class for detector-output sources.

A source produces raw detector tensors; the base class turns them into
TensorFrames, filling in the image size and timestamp when the producer does
not carry them, and numbering frames from 1 after each open().
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterator, Optional, Tuple

import numpy as np

from models.frame import TensorFrame


@dataclass
class ObservationConfig:
    """
    Attributes:
        source_id: Identifier stamped on every frame (e.g. "replay", "cam-01").
        resolution: Original image size as (width, height), for producers
                    that do not report it per frame.
        fps: Nominal frame rate, used to space timestamps for producers that
             do not report them. Without it the wall clock is used.
    """
    source_id: str = "default"
    resolution: Optional[Tuple[int, int]] = None
    fps: Optional[float] = None


@dataclass
class SourceOutput:
    """One raw detector output as produced by a source, before framing."""
    output: np.ndarray
    image_width: Optional[int] = None
    image_height: Optional[int] = None
    timestamp: Optional[float] = None


class ObservationSource(ABC):
    """
    Abstract detector-output source.

    Subclasses implement _open() and _next_output(), and _close() when they
    hold resources. The public open/read/close, context manager and
    iteration protocol live here:

        with NpyReplaySource(config) as source:
            for frame in source:
                pipeline.process_frame(frame)
    """

    def __init__(self, config: ObservationConfig):
        self._config = config
        self._is_open = False
        self._frame_index = 0
        self._start_time = 0.0

    @property
    def source_id(self) -> str:
        return self._config.source_id

    @property
    def is_open(self) -> bool:
        return self._is_open

    @property
    def frame_index(self) -> int:
        """Number of frames read since open()."""
        return self._frame_index

    @abstractmethod
    def _open(self) -> None:
        """Acquire the producer. Raise RuntimeError if it is unavailable."""

    @abstractmethod
    def _next_output(self) -> Optional[SourceOutput]:
        """Return the next raw output, or None when exhausted."""

    def _close(self) -> None:
        pass

    def open(self) -> None:
        self._open()
        self._frame_index = 0
        self._start_time = time.time()
        self._is_open = True
        logging.info(f"Source opened: source_id={self.source_id}")

    def read(self) -> Optional[TensorFrame]:
        """
        Read the next frame.

        Returns:
            TensorFrame, or None when the source is closed or exhausted.

        Raises:
            RuntimeError: If the output cannot be read or has no image size.
        """
        if not self._is_open:
            return None

        raw = self._next_output()
        if raw is None:
            return None

        width, height = raw.image_width, raw.image_height
        if width is None or height is None:
            if self._config.resolution is None:
                raise RuntimeError(
                    f"{self.source_id}: frame {self._frame_index + 1} has no image size "
                    f"and no resolution is configured"
                )
            width, height = self._config.resolution

        timestamp = raw.timestamp if raw.timestamp is not None else self._synthetic_timestamp()

        self._frame_index += 1
        return TensorFrame(
            output=raw.output,
            image_width=int(width),
            image_height=int(height),
            timestamp=float(timestamp),
            frame_index=self._frame_index,
            source=self.source_id,
        )

    def close(self) -> None:
        """Release the producer. Safe to call more than once."""
        if not self._is_open:
            return
        self._is_open = False
        self._close()
        logging.info(f"Source closed: source_id={self.source_id} frames={self._frame_index}")

    def _synthetic_timestamp(self) -> float:
        fps = self._config.fps
        if fps:
            return self._start_time + self._frame_index / float(fps)
        return time.time()

    def __enter__(self) -> "ObservationSource":
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __iter__(self) -> Iterator[TensorFrame]:
        if not self._is_open:
            raise RuntimeError("Source must be open before iterating")

        while True:
            frame = self.read()
            if frame is None:
                break
            yield frame
