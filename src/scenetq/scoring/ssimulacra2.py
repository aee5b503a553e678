"""SSIMULACRA2 through the vszip VapourSynth plugin."""

from typing import Callable, Optional

import numpy as np
import vapoursynth as vs

from ..core.video.types import Frame, YuvConfig

core = vs.core

# Frame property names used by vszip releases
SCORE_PROPS = ("SSIMULACRA2", "_SSIMULACRA2")


def _frame_clip(frame: Frame, config: YuvConfig) -> vs.VideoNode:
    """Wrap one decoded frame as a single frame RGBS clip."""
    height, width = frame.planes[0].shape
    fmt = core.query_video_format(
        vs.YUV, vs.INTEGER, config.bit_depth, config.subsampling_x, config.subsampling_y
    )
    blank = core.std.BlankClip(width=width, height=height, format=fmt.id, length=1)

    def fill(n, f):
        out = f.copy()
        for index, plane in enumerate(frame.planes):
            np.copyto(np.asarray(out[index]), plane, casting="unsafe")
        return out

    clip = core.std.ModifyFrame(blank, blank, fill)
    clip = core.std.SetFrameProps(
        clip,
        _Matrix=int(config.matrix),
        _Transfer=int(config.transfer),
        _Primaries=int(config.primaries),
        _ColorRange=0 if config.full_range else 1,
    )
    return core.resize.Bicubic(clip, format=vs.RGBS)


class Ssimulacra2Metric:
    """Scores frame pairs with ``core.vszip.SSIMULACRA2``."""

    def __init__(self, plugin: Optional[Callable[..., vs.VideoNode]] = None):
        self._plugin = plugin or core.vszip.SSIMULACRA2

    def score(
        self,
        reference: Frame,
        distorted: Frame,
        reference_config: YuvConfig,
        distorted_config: YuvConfig
    ) -> float:
        result = self._plugin(
            _frame_clip(reference, reference_config),
            _frame_clip(distorted, distorted_config)
        )
        props = result.get_frame(0).props
        for name in SCORE_PROPS:
            if name in props:
                return float(props[name])
        raise KeyError(f"No SSIMULACRA2 score in frame props: {sorted(props.keys())}")
