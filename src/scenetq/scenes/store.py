"""Trial statistics stores and the per-trial score cache."""

import json
from pathlib import Path
from typing import Dict, Optional, Protocol, Tuple, Union

from loguru import logger

from ..core.video.errors import CacheParseError, SceneFileError
from ..utils.json_helper import read_json, write_json_safely
from ..utils.validation import derived_path
from .models import QualityStats, ScenesInfo, SceneId

SCORE_CACHE_SUFFIX = ".ssimu2"


class TrialStore(Protocol):
    """Statistics per (scene, trial quantizer)."""

    def get_trial(self, scene_id: SceneId, quantizer: float) -> Optional[QualityStats]:
        ...

    def put_trial(self, scene_id: SceneId, quantizer: float, stats: QualityStats) -> None:
        ...

    def trials(self, scene_id: SceneId) -> Dict[float, QualityStats]:
        ...


class MemoryTrialStore:
    """Trial store held in a dict."""

    def __init__(self):
        self._trials: Dict[Tuple[SceneId, float], QualityStats] = {}

    def get_trial(self, scene_id: SceneId, quantizer: float) -> Optional[QualityStats]:
        return self._trials.get((tuple(scene_id), float(quantizer)))

    def put_trial(self, scene_id: SceneId, quantizer: float, stats: QualityStats) -> None:
        self._trials[(tuple(scene_id), float(quantizer))] = stats

    def trials(self, scene_id: SceneId) -> Dict[float, QualityStats]:
        return {
            quantizer: stats
            for (stored_id, quantizer), stats in sorted(self._trials.items())
            if stored_id == tuple(scene_id)
        }


class FileTrialStore:
    """Trial store persisted as a scenes file with ``quantizer_scores``.

    The file is created from ``scenes`` on first use and rewritten
    atomically on every put, so interrupted searches resume where they
    stopped.

    Args:
        path: State file
        scenes: Scene list used when the state file does not exist yet
    """

    def __init__(self, path: Union[str, Path], scenes: ScenesInfo):
        self.path = Path(path)
        if self.path.exists():
            self.state = ScenesInfo.load(self.path)
            logger.info(f"Resuming search state from {self.path}")
        else:
            self.state = scenes.model_copy(deep=True)

    def _scene(self, scene_id: SceneId):
        scene = self.state.find(scene_id)
        if scene is None:
            raise SceneFileError(
                f"Scene {scene_id[0]}-{scene_id[1]} is not in the search state",
                self.path
            )
        return scene

    def get_trial(self, scene_id: SceneId, quantizer: float) -> Optional[QualityStats]:
        scene = self.state.find(scene_id)
        if scene is None or not scene.quantizer_scores:
            return None
        return scene.quantizer_scores.get(float(quantizer))

    def put_trial(self, scene_id: SceneId, quantizer: float, stats: QualityStats) -> None:
        scene = self._scene(scene_id)
        scores = dict(scene.quantizer_scores or {})
        scores[float(quantizer)] = stats
        scene.quantizer_scores = scores
        self.state.save(self.path)

    def trials(self, scene_id: SceneId) -> Dict[float, QualityStats]:
        scene = self.state.find(scene_id)
        if scene is None or not scene.quantizer_scores:
            return {}
        return dict(sorted(scene.quantizer_scores.items()))


class ScoreCache:
    """Frame scores of one trial encode, stored beside it.

    ``clip_low.mkv`` caches to ``clip_low.ssimu2``.
    """

    def __init__(self, distorted: Union[str, Path]):
        self.path = derived_path(distorted, SCORE_CACHE_SUFFIX)

    def exists(self) -> bool:
        return self.path.exists()

    def load(self) -> Dict[int, float]:
        """Read cached scores.

        Raises:
            CacheParseError: If the cache cannot be parsed
        """
        try:
            data = read_json(self.path)
            return dict(sorted((int(index), float(score)) for index, score in data.items()))
        except (json.JSONDecodeError, AttributeError, TypeError, ValueError) as e:
            raise CacheParseError(
                f"Failed to parse score cache: {self.path}", self.path, str(e)
            ) from e

    def save(self, scores: Dict[int, float]) -> None:
        write_json_safely(self.path, {str(index): score for index, score in sorted(scores.items())})
        logger.debug(f"Cached {len(scores)} scores to {self.path}")
