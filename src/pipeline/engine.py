"""
Pipeline engine for the vehicle proximity alert core.

This module wires the per-frame stages together:
decode -> suppress -> classify -> alert, and provides a run loop over an
observation source.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

import numpy as np

from algorithms.alerting import AlertController, AlertControllerConfig
from algorithms.decoder import DecoderConfig, YoloDecoder
from algorithms.nms import non_max_suppression
from algorithms.proximity import ProximityClassifier, ProximityClassifierConfig
from models.config import Config
from models.frame import FrameResult, TensorFrame
from observation.base import ObservationSource
from pipeline.sinks import AlertSink


@dataclass
class PipelineConfig:
    """
    Configuration for the pipeline engine.

    Attributes:
        iou_threshold: Suppression threshold for overlapping detections.
        max_consecutive_failures: Max source read failures before stopping.
        stats_log_interval: Seconds between status log messages.
    """
    iou_threshold: float = 0.45
    max_consecutive_failures: int = 10
    stats_log_interval: float = 60.0


@dataclass
class PipelineStats:
    """Runtime statistics for the pipeline."""
    frame_count: int = 0
    detection_count: int = 0
    dropped_frames: int = 0
    failed_frames: int = 0
    alerts_by_level: Dict[str, int] = field(default_factory=dict)
    start_time: float = field(default_factory=time.time)
    last_stats_log_time: float = field(default_factory=time.time)
    consecutive_failures: int = 0

    @property
    def alert_count(self) -> int:
        return sum(self.alerts_by_level.values())

    def to_dict(self) -> Dict[str, object]:
        return {
            "frame_count": self.frame_count,
            "detection_count": self.detection_count,
            "dropped_frames": self.dropped_frames,
            "failed_frames": self.failed_frames,
            "alert_count": self.alert_count,
            "alerts_by_level": dict(self.alerts_by_level),
        }


class ProximityPipeline:
    """
    Per-frame proximity pipeline.

    Only one frame is processed at a time. A frame submitted while another
    is in flight is dropped (keep-only-latest backpressure) and counted in
    stats.dropped_frames.

    Example:
        pipeline = create_pipeline_from_config(Config())
        pipeline.add_alert_sink(LoggingAlertSink())
        result = pipeline.process(output, image_width=1280, image_height=720)
    """

    def __init__(
        self,
        decoder: YoloDecoder,
        classifier: ProximityClassifier,
        alert_controller: AlertController,
        config: Optional[PipelineConfig] = None,
    ):
        self.decoder = decoder
        self.classifier = classifier
        self.alert_controller = alert_controller
        self.config = config or PipelineConfig()
        self.stats = PipelineStats()
        self._running = False
        self._in_flight = threading.Lock()
        self._stats_lock = threading.Lock()
        self._callbacks: List[Callable[[FrameResult], None]] = []
        self._alert_sinks: List[AlertSink] = []

    def add_callback(self, callback: Callable[[FrameResult], None]) -> None:
        """
        Add a callback to be called after each frame is processed.

        Args:
            callback: Function taking the FrameResult (e.g. a display renderer).
        """
        self._callbacks.append(callback)

    def add_alert_sink(self, sink: AlertSink) -> None:
        """Register a sink that receives every raised alert."""
        self._alert_sinks.append(sink)

    def process(
        self,
        output: np.ndarray,
        image_width: int,
        image_height: int,
        timestamp: Optional[float] = None,
        frame_index: Optional[int] = None,
    ) -> Optional[FrameResult]:
        """
        Run one frame through decode, suppression, classification and alerting.

        Args:
            output: Raw detector tensor.
            image_width: Original image width in pixels.
            image_height: Original image height in pixels.
            timestamp: Frame time in seconds; defaults to now.
            frame_index: Sequential frame number; defaults to the frame count.

        Returns:
            The FrameResult, or None if the frame was dropped because another
            frame was still in flight.

        Raises:
            InvalidInputShape: If the tensor does not match the model config.
            ValueError: If the image dimensions are not positive.
        """
        if not self._in_flight.acquire(blocking=False):
            with self._stats_lock:
                self.stats.dropped_frames += 1
            logging.debug("Frame dropped: previous frame still in flight")
            return None

        try:
            now = time.time() if timestamp is None else timestamp
            try:
                candidates = self.decoder.decode(output, image_width, image_height)
            except ValueError:
                self.stats.failed_frames += 1
                raise

            detections = non_max_suppression(candidates, self.config.iou_threshold)
            summary = self.classifier.classify(detections)
            alert = self.alert_controller.evaluate(summary.level, now, summary.closest_proximity)

            self.stats.frame_count += 1
            self.stats.detection_count += len(detections)
            if alert is not None:
                self.stats.alerts_by_level[alert.level] = (
                    self.stats.alerts_by_level.get(alert.level, 0) + 1
                )

            result = FrameResult(
                detections=detections,
                summary=summary,
                alert=alert,
                timestamp=now,
                frame_index=self.stats.frame_count if frame_index is None else frame_index,
            )

            if alert is not None:
                for sink in self._alert_sinks:
                    try:
                        sink.on_alert(alert)
                    except Exception as e:
                        logging.warning(f"Alert sink error: {e}")

            for callback in self._callbacks:
                try:
                    callback(result)
                except Exception as e:
                    logging.warning(f"Callback error: {e}")

            logging.debug(
                f"Frame {result.frame_index}: candidates={len(candidates)} "
                f"vehicles={summary.vehicle_count} level={summary.level.value} "
                f"closest={summary.closest_proximity:.3f}"
            )
            return result
        finally:
            self._in_flight.release()

    def process_frame(self, frame: TensorFrame) -> Optional[FrameResult]:
        """Process a TensorFrame from an observation source."""
        return self.process(
            frame.output,
            frame.image_width,
            frame.image_height,
            timestamp=frame.timestamp,
            frame_index=frame.frame_index,
        )

    def run(self, source: ObservationSource) -> PipelineStats:
        """
        Run the processing loop until the source is exhausted or stopped.

        Frames that fail to decode are logged and dropped; processing
        continues with the next frame.
        """
        self._running = True
        self.stats = PipelineStats()

        try:
            source.open()
            logging.info(f"Pipeline started: source={source.source_id}")

            while self._running:
                try:
                    frame = source.read()
                except RuntimeError as e:
                    self.stats.consecutive_failures += 1
                    if self.stats.consecutive_failures >= self.config.max_consecutive_failures:
                        logging.error(
                            f"Too many consecutive failures ({self.stats.consecutive_failures}), stopping"
                        )
                        break
                    logging.warning(
                        f"Frame read failed ({self.stats.consecutive_failures}/"
                        f"{self.config.max_consecutive_failures}): {e}"
                    )
                    continue

                if frame is None:
                    logging.info("Source exhausted")
                    break

                self.stats.consecutive_failures = 0
                try:
                    self.process_frame(frame)
                except ValueError as e:
                    # InvalidInputShape or bad image size; already counted as failed
                    logging.warning(f"Frame {frame.frame_index} dropped: {e}")

                self._handle_periodic_tasks()

        except KeyboardInterrupt:
            logging.info("Pipeline interrupted by user")
        finally:
            self._cleanup(source)

        return self.stats

    def stop(self) -> None:
        """Signal the pipeline to stop after the current frame."""
        self._running = False

    def reset(self) -> None:
        """Start a new camera session: clear alert state and statistics."""
        self.alert_controller.reset()
        self.stats = PipelineStats()
        logging.info("Pipeline session reset")

    def _handle_periodic_tasks(self) -> None:
        now = time.time()
        if now - self.stats.last_stats_log_time >= self.config.stats_log_interval:
            logging.info(
                f"Pipeline stats: frames={self.stats.frame_count}, "
                f"detections={self.stats.detection_count}, "
                f"alerts={self.stats.alerts_by_level}, "
                f"dropped={self.stats.dropped_frames}, failed={self.stats.failed_frames}"
            )
            self.stats.last_stats_log_time = now

    def _cleanup(self, source: ObservationSource) -> None:
        self._running = False
        try:
            source.close()
        except Exception as e:
            logging.warning(f"Error closing source: {e}")
        logging.info("Pipeline stopped")


def create_pipeline_from_config(config: Config) -> ProximityPipeline:
    """
    Factory function to create a ProximityPipeline from the typed config.

    Args:
        config: Full application config.
    """
    decoder = YoloDecoder(
        DecoderConfig(
            input_size=config.model.input_size,
            num_classes=config.model.num_classes,
            num_anchors=config.model.num_anchors,
            conf_threshold=config.detection.conf_threshold,
            class_filter=dict(config.detection.classes),
            channels_first=config.model.channels_first,
        )
    )
    classifier = ProximityClassifier(
        ProximityClassifierConfig(
            warning_threshold=config.proximity.warning_threshold,
            danger_threshold=config.proximity.danger_threshold,
        )
    )
    alert_controller = AlertController(AlertControllerConfig(cooldown_s=config.alert.cooldown_s))
    logging.info(
        f"Pipeline configured: classes={sorted(config.detection.classes)}, "
        f"conf>{config.detection.conf_threshold}, iou<={config.detection.iou_threshold}, "
        f"cooldown={config.alert.cooldown_s}s"
    )
    return ProximityPipeline(
        decoder,
        classifier,
        alert_controller,
        PipelineConfig(iou_threshold=config.detection.iou_threshold),
    )
