"""
Observation layer for pluggable detector-output sources.

This layer abstracts where detector tensors come from (saved replays, a live
camera plus inference backend) from the processing pipeline. Each source
implements the ObservationSource interface and returns TensorFrame objects.
"""

from .base import ObservationSource, ObservationConfig, SourceOutput
from .replay_source import NpyReplaySource, ReplaySourceConfig
from .inference_source import InferenceSource

__all__ = [
    "ObservationSource",
    "ObservationConfig",
    "SourceOutput",
    "NpyReplaySource",
    "ReplaySourceConfig",
    "InferenceSource",
]
