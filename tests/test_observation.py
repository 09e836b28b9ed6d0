"""
Tests for observation layer.
"""

from typing import Optional

import numpy as np
import pytest

from observation.base import ObservationConfig, ObservationSource, SourceOutput
from observation.inference_source import InferenceSource
from observation.replay_source import NpyReplaySource, ReplaySourceConfig


class MockSource(ObservationSource):
    """Mock observation source for testing."""

    def __init__(self, config: ObservationConfig, outputs: list = None, size=(640, 480)):
        super().__init__(config)
        self._outputs = outputs or []
        self._size = size
        self._pos = 0

    def _open(self) -> None:
        self._pos = 0

    def _next_output(self) -> Optional[SourceOutput]:
        if self._pos >= len(self._outputs):
            return None

        output = self._outputs[self._pos]
        self._pos += 1
        width, height = self._size
        return SourceOutput(output=output, image_width=width, image_height=height)


class FakeBackend:
    """Inference backend returning a fixed tensor and recording its inputs."""

    def __init__(self, output: np.ndarray):
        self.output = output
        self.calls = 0

    def infer(self, image: np.ndarray) -> np.ndarray:
        self.calls += 1
        return self.output


class TestObservationConfig:
    def test_default_config(self):
        config = ObservationConfig()
        assert config.source_id == "default"
        assert config.resolution is None
        assert config.fps is None

    def test_custom_config(self):
        config = ObservationConfig(source_id="dashcam", resolution=(1280, 720), fps=15)
        assert config.source_id == "dashcam"
        assert config.resolution == (1280, 720)
        assert config.fps == 15

    def test_replay_config_from_dict(self):
        config = ReplaySourceConfig.from_dict({"path": "rec", "resolution": [1280, 720], "fps": 10})
        assert config.source_id == "replay"
        assert config.path == "rec"
        assert config.resolution == (1280, 720)
        assert config.fps == 10


class TestMockSource:
    def test_source_lifecycle(self):
        outputs = [np.zeros((84, 4), dtype=np.float32) for _ in range(3)]
        source = MockSource(ObservationConfig(source_id="test"), outputs)

        assert not source.is_open
        source.open()
        assert source.is_open

        frame = source.read()
        assert frame.frame_index == 1
        assert frame.source == "test"
        assert frame.size == (640, 480)

        source.close()
        assert not source.is_open
        assert source.read() is None

    def test_context_manager(self):
        with MockSource(ObservationConfig(), [np.zeros((84, 1))]) as source:
            assert source.is_open
            assert source.read() is not None
        assert not source.is_open

    def test_iteration(self):
        outputs = [np.zeros((84, 1)) for _ in range(5)]
        with MockSource(ObservationConfig(), outputs) as source:
            frames = list(source)
        assert [f.frame_index for f in frames] == [1, 2, 3, 4, 5]

    def test_iteration_requires_open(self):
        source = MockSource(ObservationConfig(), [])
        with pytest.raises(RuntimeError):
            list(source)

    def test_reopen_restarts_frame_index(self):
        outputs = [np.zeros((84, 1)) for _ in range(2)]
        source = MockSource(ObservationConfig(), outputs)
        with source:
            assert [f.frame_index for f in source] == [1, 2]
        with source:
            assert [f.frame_index for f in source] == [1, 2]

    def test_missing_size_falls_back_to_resolution(self):
        config = ObservationConfig(resolution=(1920, 1080))
        with MockSource(config, [np.zeros((84, 1))], size=(None, None)) as source:
            frame = source.read()
        assert frame.size == (1920, 1080)

    def test_missing_size_without_resolution_fails(self):
        with MockSource(ObservationConfig(), [np.zeros((84, 1))], size=(None, None)) as source:
            with pytest.raises(RuntimeError):
                source.read()

    def test_timestamps_filled_from_fps(self):
        outputs = [np.zeros((84, 1)) for _ in range(3)]
        with MockSource(ObservationConfig(fps=4), outputs) as source:
            timestamps = [f.timestamp for f in source]
        deltas = [b - a for a, b in zip(timestamps, timestamps[1:])]
        assert deltas == pytest.approx([0.25, 0.25], abs=1e-5)

    def test_timestamps_monotonic_without_fps(self):
        outputs = [np.zeros((84, 1)) for _ in range(3)]
        with MockSource(ObservationConfig(), outputs) as source:
            timestamps = [f.timestamp for f in source]
        assert timestamps == sorted(timestamps)


class TestNpyReplaySource:
    def test_npz_carries_image_size_and_timestamp(self, tmp_path, make_output):
        output = make_output([(320, 320, 100, 100, 2, 0.9)])
        np.savez(tmp_path / "frame_000001.npz", output=output, image_width=1280, image_height=720, timestamp=12.5)

        with NpyReplaySource(ReplaySourceConfig(path=str(tmp_path))) as source:
            frame = source.read()

        assert frame.size == (1280, 720)
        assert frame.timestamp == 12.5
        assert frame.frame_index == 1
        assert frame.source == "default"
        np.testing.assert_array_equal(frame.output, output)

    def test_files_replayed_in_name_order(self, tmp_path, make_output):
        for i in (3, 1, 2):
            np.savez(
                tmp_path / f"frame_{i:06d}.npz",
                output=make_output([]),
                image_width=640,
                image_height=640,
                timestamp=float(i),
            )
        (tmp_path / "notes.txt").write_text("not a tensor")

        with NpyReplaySource(ReplaySourceConfig(path=str(tmp_path))) as source:
            assert [p.name for p in source.files] == [
                "frame_000001.npz", "frame_000002.npz", "frame_000003.npz",
            ]
            timestamps = [f.timestamp for f in source]

        assert timestamps == [1.0, 2.0, 3.0]

    def test_npy_uses_configured_resolution(self, tmp_path, make_output):
        np.save(tmp_path / "a.npy", make_output([]))
        config = ReplaySourceConfig(path=str(tmp_path), resolution=(1920, 1080))

        with NpyReplaySource(config) as source:
            frame = source.read()

        assert frame.size == (1920, 1080)

    def test_npy_without_resolution_fails(self, tmp_path, make_output):
        np.save(tmp_path / "a.npy", make_output([]))

        with NpyReplaySource(ReplaySourceConfig(path=str(tmp_path))) as source:
            with pytest.raises(RuntimeError):
                source.read()

    def test_npz_without_output_fails(self, tmp_path):
        np.savez(tmp_path / "bad.npz", scores=np.zeros(3))

        with NpyReplaySource(ReplaySourceConfig(path=str(tmp_path), resolution=(640, 640))) as source:
            with pytest.raises(RuntimeError):
                source.read()

    def test_corrupt_file_raises_runtime_error(self, tmp_path, make_output):
        (tmp_path / "a.npy").write_bytes(b"not a numpy file")
        (tmp_path / "b.npz").write_bytes(b"PK\x03\x04 truncated")
        np.save(tmp_path / "c.npy", make_output([]))

        with NpyReplaySource(ReplaySourceConfig(path=str(tmp_path), resolution=(640, 640))) as source:
            with pytest.raises(RuntimeError, match="a.npy"):
                source.read()
            with pytest.raises(RuntimeError, match="b.npz"):
                source.read()
            frame = source.read()

        assert frame.frame_index == 1
        assert frame.size == (640, 640)

    def test_fps_spaces_timestamps(self, tmp_path, make_output):
        for i in range(3):
            np.save(tmp_path / f"{i}.npy", make_output([]))
        config = ReplaySourceConfig(path=str(tmp_path), resolution=(640, 640), fps=10)

        with NpyReplaySource(config) as source:
            timestamps = [f.timestamp for f in source]

        deltas = [b - a for a, b in zip(timestamps, timestamps[1:])]
        assert deltas == pytest.approx([0.1, 0.1], abs=1e-5)

    def test_single_file_path(self, tmp_path, make_output):
        path = tmp_path / "only.npz"
        np.savez(path, output=make_output([]), image_width=640, image_height=480)

        with NpyReplaySource(ReplaySourceConfig(path=str(path))) as source:
            frames = list(source)

        assert len(frames) == 1

    def test_missing_path(self, tmp_path):
        source = NpyReplaySource(ReplaySourceConfig(path=str(tmp_path / "nope")))
        with pytest.raises(RuntimeError):
            source.open()

    def test_read_after_close(self, tmp_path, make_output):
        np.save(tmp_path / "a.npy", make_output([]))
        source = NpyReplaySource(ReplaySourceConfig(path=str(tmp_path), resolution=(640, 640)))
        source.open()
        source.close()
        assert source.read() is None


class TestInferenceSource:
    def test_runs_backend_per_frame(self, make_output):
        output = make_output([(320, 320, 100, 100, 2, 0.9)])
        backend = FakeBackend(output)
        images = [np.zeros((720, 1280, 3), dtype=np.uint8) for _ in range(2)]

        with InferenceSource(ObservationConfig(source_id="cam"), images, backend) as source:
            frames = list(source)

        assert backend.calls == 2
        assert [f.frame_index for f in frames] == [1, 2]
        assert frames[0].size == (1280, 720)
        assert frames[0].source == "cam"
        assert frames[0].output is output

    def test_inference_is_lazy(self, make_output):
        backend = FakeBackend(make_output([]))
        images = (np.zeros((10, 10, 3)) for _ in range(100))

        with InferenceSource(ObservationConfig(), images, backend) as source:
            source.read()

        assert backend.calls == 1

    def test_not_open_returns_none(self, make_output):
        source = InferenceSource(ObservationConfig(), [np.zeros((10, 10))], FakeBackend(make_output([])))
        assert source.read() is None
