"""Common quality targeting types."""

from dataclasses import dataclass
from pathlib import Path
from typing import NamedTuple, Optional, Tuple

import numpy as np

from .color import (
    ColorPrimaries,
    MatrixCoefficients,
    TransferCharacteristics,
    is_full_range,
    resolve_matrix,
    resolve_primaries,
    resolve_transfer,
)


@dataclass(frozen=True)
class YuvConfig:
    """Sample layout and color description of one side of a frame pair.

    Attributes:
        bit_depth: Bits per sample
        subsampling_x: Horizontal chroma decimation (log2)
        subsampling_y: Vertical chroma decimation (log2)
        full_range: Whether samples use full (pc) range
        matrix: Matrix coefficients
        transfer: Transfer characteristics
        primaries: Color primaries
    """
    bit_depth: int
    subsampling_x: int
    subsampling_y: int
    full_range: bool
    matrix: MatrixCoefficients
    transfer: TransferCharacteristics
    primaries: ColorPrimaries


@dataclass(frozen=True)
class ColorTags:
    """Color tags from upstream probing, each optional.

    Attributes:
        color_range: Range tag (e.g. tv, pc)
        matrix: Matrix tag (e.g. bt709, bt2020nc)
        transfer: Transfer tag (e.g. bt709, smpte2084)
        primaries: Primaries tag (e.g. bt709, bt2020)
    """
    color_range: Optional[str] = None
    matrix: Optional[str] = None
    transfer: Optional[str] = None
    primaries: Optional[str] = None

    def resolve(
        self,
        width: int,
        height: int,
        bit_depth: int,
        subsampling: Tuple[int, int]
    ) -> YuvConfig:
        """Resolve tags into a YuvConfig for a source of the given shape."""
        matrix = resolve_matrix(self.matrix, width, height)
        return YuvConfig(
            bit_depth=bit_depth,
            subsampling_x=subsampling[0],
            subsampling_y=subsampling[1],
            full_range=is_full_range(self.color_range),
            matrix=matrix,
            transfer=resolve_transfer(self.transfer, width, height),
            primaries=resolve_primaries(self.primaries, width, height, matrix),
        )


@dataclass
class Frame:
    """One decoded frame as a tuple of sample planes (Y, U, V)."""
    planes: Tuple[np.ndarray, ...]

    @property
    def dtype(self) -> np.dtype:
        return self.planes[0].dtype


class FrameScore(NamedTuple):
    """Score for one frame pair at its decode index."""
    frame_index: int
    score: float


@dataclass(frozen=True)
class QuantizerRange:
    """Closed quantizer interval."""
    minimum: float
    maximum: float

    def __post_init__(self):
        if self.minimum > self.maximum:
            raise ValueError(
                f"Quantizer range minimum {self.minimum} exceeds maximum {self.maximum}"
            )

    def clamp(self, value: float) -> float:
        return max(self.minimum, min(self.maximum, value))

    def __contains__(self, value: float) -> bool:
        return self.minimum <= value <= self.maximum


@dataclass(frozen=True)
class TrialRequest:
    """A single trial encode.

    Attributes:
        quantizer: Quantizer for the trial
        speed: Encoder speed preset used for search trials
        encoder: Encoder identity (svt-av1, rav1e)
        output_path: Where the trial encode is written
    """
    quantizer: float
    speed: int
    encoder: str
    output_path: Path
