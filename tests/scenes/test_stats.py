"""Tests for score attribution and statistics."""

import pytest

from scenetq.scenes.models import Scene
from scenetq.scenes.stats import attribute_scores, quality_stats, scene_statistics

SCENES = [Scene(start_frame=0, end_frame=99), Scene(start_frame=100, end_frame=199)]


def test_attribution_to_inclusive_bounds():
    """Test each score lands in the scene holding its frame index."""
    grouped = attribute_scores({5: -1.0, 15: 72.0, 120: 81.0}, SCENES)
    assert grouped == {(0, 99): [72.0], (100, 199): [81.0]}


def test_non_positive_scores_excluded():
    """Test zero and negative scores never reach the statistics."""
    stats = scene_statistics({0: 0.0, 1: -3.0, 2: 60.0, 3: 80.0}, SCENES)
    assert stats[(0, 99)].mean == pytest.approx(70.0)


def test_boundary_frames():
    grouped = attribute_scores({99: 50.0, 100: 60.0, 199: 70.0, 200: 90.0}, SCENES)
    assert grouped == {(0, 99): [50.0], (100, 199): [60.0, 70.0]}


def test_scene_without_scores_skipped():
    assert list(scene_statistics({120: 81.0}, SCENES)) == [(100, 199)]


def test_quality_stats_values():
    """Test summary statistics."""
    stats = quality_stats([60.0, 70.0, 80.0, 90.0])
    assert stats.mean == pytest.approx(75.0)
    assert stats.median == pytest.approx(75.0)
    assert stats.std_dev == pytest.approx(12.909944, rel=1e-6)
    assert stats.percentile_5th < 60.0 + 1.0
    assert stats.percentile_95th > 89.0
    assert stats.percentile_5th <= stats.median <= stats.percentile_95th


def test_single_score():
    stats = quality_stats([75.0])
    assert stats.std_dev == 0.0
    assert stats.percentile_5th == stats.percentile_95th == 75.0


def test_empty_scores():
    with pytest.raises(ValueError):
        quality_stats([])
