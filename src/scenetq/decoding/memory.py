"""In-memory decoders for synthetic sources."""

from typing import Callable, Optional, Tuple, Type

import numpy as np

from ..core.video.types import Frame


def gradient_frame(
    index: int,
    width: int,
    height: int,
    bit_depth: int,
    subsampling: Tuple[int, int] = (1, 1)
) -> Frame:
    """Deterministic frame whose samples encode ``index``."""
    peak = (1 << bit_depth) - 1
    luma = (np.arange(width * height, dtype=np.int64).reshape(height, width) + index) % (peak + 1)
    chroma_shape = (height >> subsampling[1], width >> subsampling[0])
    chroma = np.full(chroma_shape, (index * 7) % (peak + 1), dtype=np.int64)
    return Frame(planes=(luma, chroma, chroma.copy()))


class SyntheticDecoder:
    """Decoder over frames generated on demand.

    Not safe for concurrent use; callers serialize reads.

    Args:
        length: Number of frames before end of stream
        width: Luma width
        height: Luma height
        bit_depth: Native bit depth
        subsampling: Chroma decimation (log2)
        declared_count: Frame count reported by ``frame_count()``;
            defaults to ``length``, pass -1 to report an unknown count
        make_frame: Frame factory, defaults to ``gradient_frame``
    """

    def __init__(
        self,
        length: int,
        width: int = 16,
        height: int = 8,
        bit_depth: int = 8,
        subsampling: Tuple[int, int] = (1, 1),
        declared_count: Optional[int] = None,
        make_frame: Optional[Callable[..., Frame]] = None
    ):
        self.length = length
        self.width = width
        self.height = height
        self.bit_depth = bit_depth
        self.subsampling = subsampling
        self._declared = length if declared_count is None else declared_count
        self._make_frame = make_frame or gradient_frame
        self.position = 0

    def read_frame(self, sample_type: Type[np.integer]) -> Optional[Frame]:
        if self.position >= self.length:
            return None
        frame = self._make_frame(
            self.position, self.width, self.height, self.bit_depth, self.subsampling
        )
        self.position += 1
        return Frame(planes=tuple(plane.astype(sample_type) for plane in frame.planes))

    def frame_count(self) -> Optional[int]:
        return None if self._declared < 0 else self._declared

