"""Decoder adapter interface."""

from typing import Optional, Protocol, Tuple, Type

import numpy as np

from ..core.video.types import Frame


class FrameDecoder(Protocol):
    """Sequential reader over one video source.

    Attributes:
        width: Luma width in pixels
        height: Luma height in pixels
        bit_depth: Native bits per sample
        subsampling: Chroma decimation as (x, y), log2
    """

    width: int
    height: int
    bit_depth: int
    subsampling: Tuple[int, int]

    def read_frame(self, sample_type: Type[np.integer]) -> Optional[Frame]:
        """Read the next frame with samples of ``sample_type``.

        Returns:
            The frame, or None at end of stream
        """
        ...

    def frame_count(self) -> Optional[int]:
        """Total number of frames, when the source declares it."""
        ...
