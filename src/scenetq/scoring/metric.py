"""Frame metric interface and sample width selection."""

from typing import Protocol, Tuple, Type

import numpy as np

from ..core.video.types import Frame, YuvConfig


class FrameMetric(Protocol):
    """Full reference similarity score over one decoded frame pair.

    Implementations must be safe to call from several threads at once.
    """

    def score(
        self,
        reference: Frame,
        distorted: Frame,
        reference_config: YuvConfig,
        distorted_config: YuvConfig
    ) -> float:
        ...


def sample_type(bit_depth: int) -> Type[np.integer]:
    """Narrowest unsigned sample type holding ``bit_depth`` bits."""
    return np.uint8 if bit_depth <= 8 else np.uint16


def select_sample_types(
    reference_depth: int,
    distorted_depth: int
) -> Tuple[Type[np.integer], Type[np.integer]]:
    """Pick sample types for both sides of a scoring run.

    Each side is chosen from its own depth so 8-bit and high bit depth
    sources can be paired in either order.
    """
    return sample_type(reference_depth), sample_type(distorted_depth)
