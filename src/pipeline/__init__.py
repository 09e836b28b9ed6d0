"""
Pipeline module for the vehicle proximity alert core.

The pipeline orchestrates the per-frame flow:
- Decoding raw detector output into vehicle candidates
- Suppressing duplicate boxes
- Classifying proximity and raising cooldown-gated alerts
- Handing results to display callbacks and alerts to alert sinks
"""

from .engine import (
    PipelineConfig,
    PipelineStats,
    ProximityPipeline,
    create_pipeline_from_config,
)
from .sinks import AlertSink, LoggingAlertSink

__all__ = [
    "PipelineConfig",
    "PipelineStats",
    "ProximityPipeline",
    "create_pipeline_from_config",
    "AlertSink",
    "LoggingAlertSink",
]
