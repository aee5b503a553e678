"""Attribution of frame scores to scenes and per-scene statistics."""

from bisect import bisect_left, bisect_right
from typing import Dict, List, Mapping, Sequence

import numpy as np

from .models import QualityStats, Scene, SceneId


def valid_scores(frame_scores: Mapping[int, float]) -> Dict[int, float]:
    """Drop non-positive scores, which the metric reports for failed frames."""
    return {index: score for index, score in frame_scores.items() if score > 0}


def quality_stats(scores: Sequence[float]) -> QualityStats:
    """Summary statistics of one scene's scores.

    Percentiles follow the median-unbiased estimator. A single score has a
    standard deviation of 0.
    """
    values = np.asarray(scores, dtype=np.float64)
    if values.size == 0:
        raise ValueError("Cannot compute statistics without scores")
    p5, p95 = np.percentile(values, [5, 95], method="median_unbiased")
    return QualityStats(
        mean=float(values.mean()),
        median=float(np.median(values)),
        std_dev=float(values.std(ddof=1)) if values.size > 1 else 0.0,
        percentile_5th=float(p5),
        percentile_95th=float(p95),
    )


def attribute_scores(
    frame_scores: Mapping[int, float],
    scenes: Sequence[Scene]
) -> Dict[SceneId, List[float]]:
    """Group valid scores by the scene whose inclusive bounds hold them.

    Scenes receiving no valid score are left out.
    """
    filtered = valid_scores(frame_scores)
    indices = sorted(filtered)
    grouped: Dict[SceneId, List[float]] = {}
    for scene in scenes:
        lo = bisect_left(indices, scene.start_frame)
        hi = bisect_right(indices, scene.end_frame)
        if lo < hi:
            grouped[scene.scene_id] = [filtered[i] for i in indices[lo:hi]]
    return grouped


def scene_statistics(
    frame_scores: Mapping[int, float],
    scenes: Sequence[Scene]
) -> Dict[SceneId, QualityStats]:
    return {
        scene_id: quality_stats(scores)
        for scene_id, scores in attribute_scores(frame_scores, scenes).items()
    }
