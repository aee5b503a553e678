"""Decoder adapters.

The VapourSynth decoder is imported lazily so the package works without
VapourSynth installed.
"""

from pathlib import Path
from typing import Union

from .base import FrameDecoder
from .memory import SyntheticDecoder


def open_decoder(path: Union[str, Path], source_filter: str = "bestsource") -> FrameDecoder:
    """Open a video file or VapourSynth script for sequential decoding.

    Raises:
        DecodeOpenError: If the source cannot be opened
    """
    from .vapoursynth import VapourSynthDecoder
    return VapourSynthDecoder(path, source_filter)


__all__ = ['FrameDecoder', 'SyntheticDecoder', 'open_decoder']
