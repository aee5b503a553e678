"""Concurrent frame pair scoring."""

from typing import Dict, Optional

from ..core.video.types import ColorTags
from ..decoding.base import FrameDecoder
from .aggregator import (
    RecoveryPolicy,
    ResultAggregator,
    RunningAverage,
    always_abort,
    always_continue,
)
from .metric import FrameMetric, select_sample_types
from .pool import DecodeCursor, FrameScorerPool, ScoringRun, default_thread_count


def score_pair(
    reference: FrameDecoder,
    distorted: FrameDecoder,
    metric: FrameMetric,
    color: Optional[ColorTags] = None,
    cycle: int = 1,
    threads: Optional[int] = None,
    recovery: RecoveryPolicy = always_continue,
    progress: Optional[bool] = None
) -> Dict[int, float]:
    """Score every aligned frame pair of two decoders.

    Color tags are resolved separately for each side from its own
    dimensions and sample layout.

    Returns:
        Scores keyed by canonical frame index (decode index times ``cycle``)
    """
    color = color or ColorTags()
    pool = FrameScorerPool(
        metric,
        color.resolve(reference.width, reference.height,
                      reference.bit_depth, reference.subsampling),
        color.resolve(distorted.width, distorted.height,
                      distorted.bit_depth, distorted.subsampling),
        threads=threads
    )
    aggregator = ResultAggregator(cycle=cycle, recovery=recovery, progress=progress)
    return aggregator.collect(pool.start(reference, distorted))


__all__ = [
    'DecodeCursor',
    'FrameMetric',
    'FrameScorerPool',
    'RecoveryPolicy',
    'ResultAggregator',
    'RunningAverage',
    'ScoringRun',
    'always_abort',
    'always_continue',
    'default_thread_count',
    'score_pair',
    'select_sample_types',
]
