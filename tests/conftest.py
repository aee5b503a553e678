"""Common test fixtures and utilities."""
import json
import sys
import types
from unittest.mock import MagicMock

import pytest
from loguru import logger

from scenetq.config import SearchConfig
from scenetq.decoding import SyntheticDecoder


class PlaneValueMetric:
    """Scores a pair with the first luma sample of the distorted frame."""

    def score(self, reference, distorted, reference_config, distorted_config):
        return float(distorted.planes[0].flat[0])


@pytest.fixture
def temp_dir(tmp_path):
    """Create a temporary directory for tests."""
    return tmp_path


@pytest.fixture
def metric():
    return PlaneValueMetric()


@pytest.fixture
def svt_config():
    """Configuration matching the worked example: range [25, 55], q 40, step 5."""
    return SearchConfig(
        encoder="svt-av1",
        quantizer=40,
        quantizer_step=5,
        quantizer_range=(25, 55),
        target_quality=80,
        cycle=1,
        threads=2
    )


@pytest.fixture
def scenes_file(temp_dir):
    """Scenes file with two scenes in av1an layout."""
    path = temp_dir / "clip_scenes.json"
    path.write_text(json.dumps({
        "scenes": [
            {"start_frame": 0, "end_frame": 99, "zone_overrides": None},
            {"start_frame": 100, "end_frame": 199, "zone_overrides": None},
        ],
        "frames": 200,
        "split_scenes": [],
    }))
    return path


@pytest.fixture
def synthetic_pair():
    """Factory for a reference/distorted pair of synthetic decoders."""
    def make(length=500, **kwargs):
        return SyntheticDecoder(length, **kwargs), SyntheticDecoder(length, **kwargs)
    return make


@pytest.fixture
def caplog_loguru():
    """Collect loguru messages at DEBUG and above."""
    messages = []
    handler_id = logger.add(lambda msg: messages.append(msg.record), level="DEBUG")
    yield messages
    logger.remove(handler_id)


@pytest.fixture
def fake_vapoursynth(mocker):
    """Stand-in ``vapoursynth`` module with a mocked core.

    Modules importing VapourSynth are dropped from ``sys.modules`` so the
    next import binds to the stand-in; everything is restored afterwards.
    """
    vs = types.ModuleType("vapoursynth")

    class Error(Exception):
        pass

    class VideoNode:
        pass

    vs.Error = Error
    vs.VideoNode = VideoNode
    vs.INTEGER = 0
    vs.FLOAT = 1
    vs.YUV = 3000000
    vs.RGBS = 1020000
    vs.core = MagicMock(name="core")
    vs.clear_outputs = MagicMock(name="clear_outputs")
    vs.get_output = MagicMock(name="get_output")

    mocker.patch.dict(sys.modules, {"vapoursynth": vs})
    for name in ("scenetq.decoding.vapoursynth", "scenetq.scoring.ssimulacra2"):
        sys.modules.pop(name, None)
    return vs
