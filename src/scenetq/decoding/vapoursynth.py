"""VapourSynth backed decoder."""

import runpy
from pathlib import Path
from typing import Optional, Tuple, Type, Union

import numpy as np
import vapoursynth as vs
from loguru import logger

from ..core.video.errors import DecodeOpenError
from ..core.video.types import Frame
from ..utils.validation import validate_source

core = vs.core


def _evaluate_script(path: Path) -> vs.VideoNode:
    vs.clear_outputs()
    try:
        runpy.run_path(str(path), run_name="__vapoursynth__")
        output = vs.get_output(0)
    except Exception as e:
        # includes import and syntax errors raised inside the script
        raise DecodeOpenError(f"Failed to evaluate {path}", path, str(e)) from e
    return getattr(output, "clip", output)


def load_clip(path: Union[str, Path], source_filter: str = "bestsource") -> vs.VideoNode:
    """Open a video file or VapourSynth script as a clip.

    Scripts must set their clip as output 0.

    Raises:
        DecodeOpenError: If the source cannot be opened
    """
    path = validate_source(path)
    if path.suffix == ".vpy":
        return _evaluate_script(path)
    try:
        if source_filter == "lsmash":
            return core.lsmas.LWLibavSource(source=str(path), cache=0)
        if source_filter == "dgdecnv":
            return core.dgdecodenv.DGSource(str(path))
        return core.bs.VideoSource(source=str(path))
    except (vs.Error, KeyError, AttributeError) as e:
        raise DecodeOpenError(f"Failed to open {path}", path, str(e)) from e


class VapourSynthDecoder:
    """Reads a clip front to back as numpy planes."""

    def __init__(self, path: Union[str, Path], source_filter: str = "bestsource"):
        self.path = Path(path)
        self.clip = load_clip(path, source_filter)
        fmt = self.clip.format
        if fmt is None or fmt.sample_type != vs.INTEGER:
            raise DecodeOpenError(
                f"Unsupported clip format in {self.path}", self.path,
                "constant format integer YUV is required"
            )
        self.width = self.clip.width
        self.height = self.clip.height
        self.bit_depth = fmt.bits_per_sample
        self.subsampling: Tuple[int, int] = (fmt.subsampling_w, fmt.subsampling_h)
        self._next = 0
        logger.debug(
            f"Opened {self.path.name}: {self.width}x{self.height} "
            f"{fmt.name}, {self.clip.num_frames} frames"
        )

    def read_frame(self, sample_type: Type[np.integer]) -> Optional[Frame]:
        if self._next >= self.clip.num_frames:
            return None
        frame = self.clip.get_frame(self._next)
        self._next += 1
        planes = tuple(
            np.asarray(frame[plane]).astype(sample_type)
            for plane in range(frame.format.num_planes)
        )
        return Frame(planes=planes)

    def frame_count(self) -> Optional[int]:
        return self.clip.num_frames
