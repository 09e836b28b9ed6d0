"""
Pytest configuration and shared fixtures.
"""

import os
import sys

import numpy as np
import pytest

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))


def build_output(anchors, num_classes=80, num_anchors=None, dtype=np.float32):
    """
    Build a channel-major detector tensor of shape (4 + num_classes, N).

    Args:
        anchors: Iterable of (cx, cy, w, h, class_id, score) in model space.
        num_classes: Number of class score rows.
        num_anchors: Pad with empty anchors up to this count.
    """
    anchors = list(anchors)
    n = max(len(anchors), num_anchors or 0)
    out = np.zeros((4 + num_classes, n), dtype=dtype)
    for i, (cx, cy, w, h, class_id, score) in enumerate(anchors):
        out[0:4, i] = (cx, cy, w, h)
        out[4 + class_id, i] = score
    return out


@pytest.fixture
def make_output():
    """Factory for channel-major detector tensors."""
    return build_output


@pytest.fixture
def temp_config_dir(tmp_path):
    """Create a temporary config directory with default.yaml."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()

    default_yaml = config_dir / "default.yaml"
    default_yaml.write_text("""
model:
  input_size: 640
  num_classes: 80
  num_anchors: 8400

detection:
  conf_threshold: 0.3
  iou_threshold: 0.45
  classes:
    2: "car"
    7: "truck"

proximity:
  warning_threshold: 0.25
  danger_threshold: 0.4

alert:
  cooldown_s: 2.0

log_path: "logs/test.log"
log_level: "INFO"
""")

    return config_dir


@pytest.fixture
def valid_config():
    """Return a valid configuration dictionary."""
    return {
        "model": {
            "input_size": 640,
            "num_classes": 80,
            "num_anchors": 8400,
            "channels_first": True,
        },
        "detection": {
            "conf_threshold": 0.3,
            "iou_threshold": 0.45,
            "classes": {2: "car", 3: "motorcycle", 5: "bus", 7: "truck"},
        },
        "proximity": {
            "warning_threshold": 0.25,
            "danger_threshold": 0.4,
        },
        "alert": {
            "cooldown_s": 2.0,
        },
        "log_path": "logs/test.log",
        "log_level": "INFO",
    }
