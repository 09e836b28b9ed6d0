"""
Replay source for detector outputs saved to disk.

Reads a directory (or a single file) of saved detector tensors:
- `.npy`: the raw output tensor; image size comes from the config resolution
- `.npz`: an `output` array plus optional `image_width`, `image_height`
  and `timestamp` scalars

Files are replayed in lexical order, which makes zero-padded names
(frame_000001.npz, ...) replay in capture order.
"""

from __future__ import annotations

import logging
import zipfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

import numpy as np

from .base import ObservationSource, ObservationConfig, SourceOutput

REPLAY_SUFFIXES = (".npy", ".npz")

# np.load failures on truncated, corrupt or pickled files
_LOAD_ERRORS = (OSError, EOFError, ValueError, KeyError, zipfile.BadZipFile)


@dataclass
class ReplaySourceConfig(ObservationConfig):
    """
    Configuration for replaying saved detector outputs.

    Attributes:
        path: Directory of .npy/.npz files, or a single file.
    """
    path: str = ""

    @classmethod
    def from_dict(cls, d: Dict[str, Any], source_id: str = "replay") -> "ReplaySourceConfig":
        resolution = d.get("resolution")
        if resolution:
            resolution = tuple(resolution)
        return cls(
            source_id=source_id,
            resolution=resolution,
            fps=d.get("fps"),
            path=d.get("path", ""),
        )


class NpyReplaySource(ObservationSource):
    """
    Observation source that replays saved detector tensors.

    A file that cannot be loaded raises RuntimeError from read(); the
    pipeline run loop counts it as a read failure and moves on to the next
    file.

    Example:
        config = ReplaySourceConfig(path="recordings/run1", resolution=(1280, 720), fps=15)
        with NpyReplaySource(config) as source:
            for frame in source:
                pipeline.process_frame(frame)
    """

    def __init__(self, config: ReplaySourceConfig):
        super().__init__(config)
        self._path = Path(config.path)
        self._files: List[Path] = []
        self._pos = 0

    @property
    def files(self) -> List[Path]:
        return list(self._files)

    def _open(self) -> None:
        path = self._path
        if path.is_dir():
            files = sorted(p for p in path.iterdir() if p.suffix in REPLAY_SUFFIXES)
        elif path.is_file() and path.suffix in REPLAY_SUFFIXES:
            files = [path]
        else:
            raise RuntimeError(f"Replay path not found or unsupported: {path}")

        self._files = files
        self._pos = 0
        logging.info(f"Replaying {len(files)} files from {path}")

    def _next_output(self) -> Optional[SourceOutput]:
        if self._pos >= len(self._files):
            return None

        path = self._files[self._pos]
        self._pos += 1
        try:
            return self._load(path)
        except _LOAD_ERRORS as e:
            raise RuntimeError(f"{path.name}: cannot load detector output ({e})") from e

    @staticmethod
    def _load(path: Path) -> SourceOutput:
        if path.suffix == ".npy":
            return SourceOutput(output=np.load(path))

        with np.load(path) as data:
            names = set(data.files)
            if "output" not in names:
                raise RuntimeError(f"{path.name}: missing 'output' array")
            return SourceOutput(
                output=data["output"],
                image_width=data["image_width"].item() if "image_width" in names else None,
                image_height=data["image_height"].item() if "image_height" in names else None,
                timestamp=data["timestamp"].item() if "timestamp" in names else None,
            )
