"""Tests for the VapourSynth decoder against a stand-in vapoursynth module."""

import importlib
from types import SimpleNamespace

import numpy as np
import pytest

from scenetq.core.video.errors import DecodeOpenError
from scenetq.decoding import open_decoder


class FakeVideoFrame:
    def __init__(self, planes, fmt):
        self._planes = planes
        self.format = fmt

    def __getitem__(self, index):
        return self._planes[index]


class FakeClip:
    """Clip of 16x8 4:2:0 frames whose samples equal the frame number."""

    def __init__(self, num_frames, fmt, dtype=np.uint16):
        self.format = fmt
        self.width = 16
        self.height = 8
        self.num_frames = num_frames
        self.dtype = dtype
        self.requested = []

    def get_frame(self, n):
        self.requested.append(n)
        planes = [
            np.full((8, 16), n, dtype=self.dtype),
            np.full((4, 8), n + 100, dtype=self.dtype),
            np.full((4, 8), n + 200, dtype=self.dtype),
        ]
        return FakeVideoFrame(planes, self.format)


def clip_format(vs, sample_type=None, bits=10):
    return SimpleNamespace(
        sample_type=vs.INTEGER if sample_type is None else sample_type,
        bits_per_sample=bits,
        subsampling_w=1,
        subsampling_h=1,
        name=f"YUV420P{bits}",
        num_planes=3,
    )


@pytest.fixture
def vsdecoder(fake_vapoursynth):
    return importlib.import_module("scenetq.decoding.vapoursynth")


@pytest.fixture
def video(temp_dir):
    path = temp_dir / "clip.mkv"
    path.write_bytes(b"\x1a\x45\xdf\xa3")
    return path


@pytest.fixture
def script(temp_dir):
    def write(body):
        path = temp_dir / "clip_skip.vpy"
        path.write_text(body)
        return path
    return write


@pytest.mark.parametrize("source_filter,plugin", [
    ("bestsource", "bs.VideoSource"),
    ("lsmash", "lsmas.LWLibavSource"),
    ("dgdecnv", "dgdecodenv.DGSource"),
])
def test_source_filter_choice(vsdecoder, fake_vapoursynth, video, source_filter, plugin):
    """Test each source filter opens the file with its plugin."""
    namespace, function = plugin.split(".")
    source = getattr(getattr(fake_vapoursynth.core, namespace), function)

    clip = vsdecoder.load_clip(video, source_filter)

    assert clip is source.return_value
    source.assert_called_once()
    assert str(video) in list(source.call_args[0]) + list(source.call_args[1].values())


def test_lsmash_disables_index_cache(vsdecoder, fake_vapoursynth, video):
    vsdecoder.load_clip(video, "lsmash")
    fake_vapoursynth.core.lsmas.LWLibavSource.assert_called_once_with(source=str(video), cache=0)


def test_plugin_error_is_decode_error(vsdecoder, fake_vapoursynth, video):
    """Test a source plugin failure surfaces as DecodeOpenError."""
    fake_vapoursynth.core.bs.VideoSource.side_effect = fake_vapoursynth.Error("no video track")
    with pytest.raises(DecodeOpenError) as exc_info:
        vsdecoder.load_clip(video)
    assert exc_info.value.path == video
    assert "no video track" in exc_info.value.details


def test_missing_source(vsdecoder, temp_dir):
    with pytest.raises(DecodeOpenError, match="does not exist"):
        vsdecoder.load_clip(temp_dir / "missing.mkv")


def test_script_output_clip(vsdecoder, fake_vapoursynth, script):
    """Test a script is evaluated and its output 0 clip returned."""
    clip = object()
    fake_vapoursynth.get_output.return_value = SimpleNamespace(clip=clip)
    path = script("import vapoursynth as vs\nvs.script_ran = True\n")

    assert vsdecoder.load_clip(path) is clip
    assert fake_vapoursynth.script_ran is True
    fake_vapoursynth.clear_outputs.assert_called_once()
    fake_vapoursynth.get_output.assert_called_once_with(0)
    fake_vapoursynth.core.bs.VideoSource.assert_not_called()


@pytest.mark.parametrize("body", [
    "import vstools_missing_module\n",
    "clip = (\n",
    "raise OSError('cannot read source')\n",
])
def test_broken_script_is_decode_error(fake_vapoursynth, script, body):
    """Test any error raised by a script surfaces as DecodeOpenError."""
    path = script(body)
    with pytest.raises(DecodeOpenError, match="Failed to evaluate"):
        open_decoder(path)


def test_script_without_output(vsdecoder, fake_vapoursynth, script):
    """Test a script that sets no output is a decode error."""
    fake_vapoursynth.get_output.side_effect = KeyError(0)
    with pytest.raises(DecodeOpenError):
        vsdecoder.load_clip(script("pass\n"))


def test_decoder_properties(vsdecoder, fake_vapoursynth, video):
    """Test layout properties come from the clip format."""
    fake_vapoursynth.core.bs.VideoSource.return_value = FakeClip(3, clip_format(fake_vapoursynth))
    decoder = vsdecoder.VapourSynthDecoder(video)
    assert (decoder.width, decoder.height) == (16, 8)
    assert decoder.bit_depth == 10
    assert decoder.subsampling == (1, 1)
    assert decoder.frame_count() == 3


def test_reads_stop_at_num_frames(vsdecoder, fake_vapoursynth, video):
    """Test frames are read in order and reading ends at the clip length."""
    clip = FakeClip(2, clip_format(fake_vapoursynth))
    fake_vapoursynth.core.bs.VideoSource.return_value = clip
    decoder = vsdecoder.VapourSynthDecoder(video)

    first = decoder.read_frame(np.uint16)
    second = decoder.read_frame(np.uint16)

    assert int(first.planes[0][0, 0]) == 0
    assert int(second.planes[0][0, 0]) == 1
    assert decoder.read_frame(np.uint16) is None
    assert decoder.read_frame(np.uint16) is None
    assert clip.requested == [0, 1]


@pytest.mark.parametrize("bits,dtype,sample_type", [
    (8, np.uint8, np.uint8),
    (8, np.uint8, np.uint16),
    (10, np.uint16, np.uint16),
])
def test_planes_converted_to_sample_type(vsdecoder, fake_vapoursynth, video,
                                         bits, dtype, sample_type):
    """Test every plane is returned at the requested sample width."""
    clip = FakeClip(1, clip_format(fake_vapoursynth, bits=bits), dtype=dtype)
    fake_vapoursynth.core.bs.VideoSource.return_value = clip
    frame = vsdecoder.VapourSynthDecoder(video).read_frame(sample_type)

    assert len(frame.planes) == 3
    assert all(plane.dtype == np.dtype(sample_type) for plane in frame.planes)
    assert frame.planes[0].shape == (8, 16)
    assert frame.planes[1].shape == (4, 8)
    assert int(frame.planes[2][0, 0]) == 200


def test_float_format_rejected(vsdecoder, fake_vapoursynth, video):
    """Test clips with float samples are refused."""
    fmt = clip_format(fake_vapoursynth, sample_type=fake_vapoursynth.FLOAT, bits=32)
    fake_vapoursynth.core.bs.VideoSource.return_value = FakeClip(1, fmt)
    with pytest.raises(DecodeOpenError, match="Unsupported clip format"):
        vsdecoder.VapourSynthDecoder(video)


def test_variable_format_rejected(vsdecoder, fake_vapoursynth, video):
    clip = FakeClip(1, None)
    fake_vapoursynth.core.bs.VideoSource.return_value = clip
    with pytest.raises(DecodeOpenError):
        vsdecoder.VapourSynthDecoder(video)
