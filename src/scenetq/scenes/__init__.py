"""Scene descriptions, statistics and persisted search state."""

from .models import QualityStats, Scene, SceneId, ScenesInfo, ZoneOverrides
from .stats import attribute_scores, quality_stats, scene_statistics, valid_scores
from .store import FileTrialStore, MemoryTrialStore, ScoreCache, TrialStore

__all__ = [
    'QualityStats',
    'Scene',
    'SceneId',
    'ScenesInfo',
    'ZoneOverrides',
    'attribute_scores',
    'quality_stats',
    'scene_statistics',
    'valid_scores',
    'FileTrialStore',
    'MemoryTrialStore',
    'ScoreCache',
    'TrialStore',
]
