"""
Vehicle proximity alert: replay detector outputs through the alert pipeline.

Reads saved detector tensors, decodes nearby vehicles, and raises
cooldown-gated proximity alerts.

Usage:
    python src/main.py --config config/config.yaml --input recordings/run1 --image-size 1280 720

Arguments:
    --config: Path to configuration file
    --input: Directory of .npy/.npz detector outputs (or a single file)
    --image-size: Original image width and height, for files that do not carry it
    --fps: Frame rate used to space timestamps of files without one
    --json: Print every frame result as a JSON line
"""

import os
import sys
import argparse
import json
import logging
from typing import Any, Dict, Optional, Tuple

import yaml

from models.config import Config
from observation.replay_source import NpyReplaySource, ReplaySourceConfig
from ops.logging import setup_logging
from pipeline.engine import create_pipeline_from_config
from pipeline.sinks import LoggingAlertSink

VALID_LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge override into base and return base."""
    for k, v in (override or {}).items():
        if isinstance(v, dict) and isinstance(base.get(k), dict):
            _deep_merge(base[k], v)
        else:
            base[k] = v
    return base


def load_config(config_path: str) -> Dict[str, Any]:
    """
    Load configuration with layering:
    - `config/default.yaml` (checked in)
    - `config/config.yaml` (local overrides)
    - plus any explicitly provided `--config` path (treated as overrides)
    """
    try:
        base_path = os.path.join(os.path.dirname(config_path), "default.yaml")
        base_cfg: Dict[str, Any] = {}
        if os.path.exists(base_path):
            with open(base_path, "r") as f:
                base_cfg = yaml.safe_load(f) or {}

        local_overrides_path = os.path.join(os.path.dirname(config_path), "config.yaml")
        local_cfg: Dict[str, Any] = {}
        if os.path.exists(local_overrides_path):
            with open(local_overrides_path, "r") as f:
                local_cfg = yaml.safe_load(f) or {}

        merged = _deep_merge(base_cfg, local_cfg)

        # Finally apply explicit config_path if it's not the local override file itself
        if os.path.exists(config_path) and os.path.abspath(config_path) != os.path.abspath(local_overrides_path):
            with open(config_path, "r") as f:
                explicit_cfg = yaml.safe_load(f) or {}
            merged = _deep_merge(merged, explicit_cfg)

        return merged
    except Exception as e:
        logging.error(f"Failed to load configuration: {e}")
        sys.exit(1)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_positive_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def validate_config(config: Dict[str, Any]) -> Tuple[bool, Optional[str]]:
    """
    Validate configuration file structure and values.

    Args:
        config: Configuration dictionary

    Returns:
        Tuple of (is_valid, error_message)
    """
    required_sections = ['model', 'detection', 'proximity', 'alert', 'log_level']
    for section in required_sections:
        if section not in config:
            return False, f"Missing required configuration section: {section}"

    # Model output shape
    model = config.get('model') or {}
    for key in ('input_size', 'num_classes'):
        if key in model and not _is_positive_int(model[key]):
            return False, f"model.{key} must be a positive integer"
    if model.get('num_anchors') is not None and not _is_positive_int(model['num_anchors']):
        return False, "model.num_anchors must be a positive integer or null"
    if 'channels_first' in model and not isinstance(model['channels_first'], bool):
        return False, "model.channels_first must be true or false"

    # Decoding / suppression
    detection = config.get('detection') or {}
    for key in ('conf_threshold', 'iou_threshold'):
        if key in detection:
            value = detection[key]
            if not _is_number(value) or not (0 <= value < 1):
                return False, f"detection.{key} must be a number in [0, 1)"
    classes = detection.get('classes')
    if classes is not None:
        if not isinstance(classes, dict) or not classes:
            return False, "detection.classes must be a non-empty mapping of class id to label"
        for class_id, label in classes.items():
            try:
                class_id = int(class_id)
            except (TypeError, ValueError):
                return False, f"detection.classes key {class_id!r} is not a class id"
            if class_id < 0:
                return False, "detection.classes ids must be non-negative"
            if not isinstance(label, str) or not label:
                return False, f"detection.classes[{class_id}] must be a non-empty string"
        num_classes = model.get('num_classes', 80)
        if _is_positive_int(num_classes) and any(int(k) >= num_classes for k in classes):
            return False, "detection.classes ids must be below model.num_classes"

    # Proximity thresholds
    proximity = config.get('proximity') or {}
    warning = proximity.get('warning_threshold', 0.25)
    danger = proximity.get('danger_threshold', 0.4)
    if not _is_number(warning) or not (0 < warning < 1):
        return False, "proximity.warning_threshold must be between 0 and 1"
    if not _is_number(danger) or not (0 < danger < 1):
        return False, "proximity.danger_threshold must be between 0 and 1"
    if warning >= danger:
        return False, "proximity.warning_threshold must be below proximity.danger_threshold"

    # Alerts
    alert = config.get('alert') or {}
    if 'cooldown_s' in alert:
        if not _is_number(alert['cooldown_s']) or alert['cooldown_s'] < 0:
            return False, "alert.cooldown_s must be a non-negative number"
    phrases = alert.get('phrases')
    if phrases is not None and not isinstance(phrases, dict):
        return False, "alert.phrases must be a mapping of alert level to phrase"

    # Log settings
    if config['log_level'] not in VALID_LOG_LEVELS:
        return False, f"log_level must be one of: {', '.join(VALID_LOG_LEVELS)}"

    return True, None


def main():
    """Main application function."""
    parser = argparse.ArgumentParser(description='Vehicle Proximity Alert - tensor replay')
    parser.add_argument('--config', type=str, default='config/config.yaml',
                        help='Path to configuration file')
    parser.add_argument('--input', type=str, required=True,
                        help='Directory of .npy/.npz detector outputs, or a single file')
    parser.add_argument('--image-size', type=int, nargs=2, metavar=('WIDTH', 'HEIGHT'),
                        help='Original image size for files that do not carry one')
    parser.add_argument('--fps', type=float, default=None,
                        help='Frame rate used to space timestamps of files without one')
    parser.add_argument('--json', action='store_true',
                        help='Print every frame result as a JSON line')
    args = parser.parse_args()

    raw_config = load_config(args.config)

    is_valid, error_msg = validate_config(raw_config)
    if not is_valid:
        logging.error(f"Configuration validation failed: {error_msg}")
        sys.exit(1)

    config = Config.from_dict(raw_config)
    setup_logging(config.log_path, config.log_level)
    logging.info("Starting Vehicle Proximity Alert")

    pipeline = create_pipeline_from_config(config)
    pipeline.add_alert_sink(LoggingAlertSink(config.alert.phrases))
    if args.json:
        pipeline.add_callback(lambda result: print(json.dumps(result.to_dict()), flush=True))

    source = NpyReplaySource(
        ReplaySourceConfig(
            source_id="replay",
            resolution=tuple(args.image_size) if args.image_size else None,
            fps=args.fps,
            path=args.input,
        )
    )

    try:
        stats = pipeline.run(source)
    except RuntimeError as e:
        logging.error(f"Replay failed: {e}")
        sys.exit(1)

    logging.info(f"Replay finished: {stats.to_dict()}")


if __name__ == "__main__":
    main()
