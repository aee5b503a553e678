"""Per-scene quantizer search."""

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Optional

from loguru import logger

from ..config import SearchConfig
from ..core.video.types import TrialRequest
from ..decoding import FrameDecoder, open_decoder
from ..encoding.runner import EncoderRunner
from ..scenes.models import QualityStats, ScenesInfo, SceneId
from ..scenes.stats import scene_statistics
from ..scenes.store import ScoreCache, TrialStore
from ..scoring import score_pair
from ..scoring.aggregator import RecoveryPolicy, always_continue
from ..scoring.metric import FrameMetric
from ..utils.validation import derived_path
from .quantizer import (
    TRIAL_OFFSETS,
    TRIAL_SUFFIXES,
    fit_quality_curve,
    round_quantizer,
    solve_quantizer,
    trial_quantizer,
)

DecoderFactory = Callable[[Path, str], FrameDecoder]


@dataclass
class TrialOutcome:
    """What happened to one trial.

    Attributes:
        request: The trial encode
        skipped: True when every scene already had statistics for it
        stats: Statistics gathered this run, by scene
    """
    request: TrialRequest
    skipped: bool
    stats: Dict[SceneId, QualityStats]


class QuantizerSearch:
    """Drives trial encodes, scoring and curve fitting for a scene list.

    Args:
        config: Search settings
        runner: Produces trial encodes
        store: Trial statistics, possibly from earlier runs
        metric: Frame metric used to score trials
        open_source: Opens a decoder for a path and source filter
        recovery: Decides whether stalled scoring rounds continue
        progress: Show progress bars (default: when stderr is a terminal)
    """

    def __init__(
        self,
        config: SearchConfig,
        runner: EncoderRunner,
        store: TrialStore,
        metric: FrameMetric,
        open_source: DecoderFactory = open_decoder,
        recovery: RecoveryPolicy = always_continue,
        progress: Optional[bool] = None
    ):
        self.config = config
        self.runner = runner
        self.store = store
        self.metric = metric
        self.open_source = open_source
        self.recovery = recovery
        self.progress = progress

    def trial_requests(self, base_path: Path) -> List[TrialRequest]:
        """The four trial encodes, named after ``base_path``."""
        config = self.config
        return [
            TrialRequest(
                quantizer=trial_quantizer(
                    config.quantizer, config.quantizer_step, offset, config.range
                ),
                speed=config.search_speed,
                encoder=config.encoder,
                output_path=derived_path(base_path, f"{TRIAL_SUFFIXES[offset]}.mkv"),
            )
            for offset in TRIAL_OFFSETS
        ]

    def score_trial(self, reference: Path, distorted: Path) -> Dict[int, float]:
        """Frame scores of a trial, from its cache when present."""
        cache = ScoreCache(distorted)
        if cache.exists():
            logger.info(f"Using cached scores: {cache.path.name}")
            return cache.load()
        scores = score_pair(
            self.open_source(reference, self.config.source_filter),
            self.open_source(distorted, self.config.source_filter),
            self.metric,
            color=self.config.color_tags(),
            cycle=self.config.cycle,
            threads=self.config.threads,
            recovery=self.recovery,
            progress=self.progress
        )
        cache.save(scores)
        return scores

    def run_trial(
        self,
        request: TrialRequest,
        reference: Path,
        trial_scenes: Path,
        scenes: ScenesInfo
    ) -> TrialOutcome:
        """Encode and score one trial, recording missing statistics."""
        scene_ids = [scene.scene_id for scene in scenes.scenes]
        if all(self.store.get_trial(scene_id, request.quantizer) is not None
               for scene_id in scene_ids):
            logger.info(f"Trial at quantizer {request.quantizer} already scored, skipping")
            return TrialOutcome(request=request, skipped=True, stats={})

        output = self.runner.run_trial(reference, trial_scenes, request)
        stats = scene_statistics(self.score_trial(reference, output), scenes.scenes)
        for scene_id, scene_stats in stats.items():
            if self.store.get_trial(scene_id, request.quantizer) is None:
                self.store.put_trial(scene_id, request.quantizer, scene_stats)
        logger.info(
            f"Trial at quantizer {request.quantizer}: "
            f"{len(stats)} of {len(scene_ids)} scenes scored"
        )
        return TrialOutcome(request=request, skipped=False, stats=stats)

    def solve_scene(self, scene_id: SceneId) -> float:
        """Final quantizer of one scene from its stored trials."""
        trials = self.store.trials(scene_id)
        quantizers = list(trials)
        means = [stats.mean + self.config.quality_compensation for stats in trials.values()]
        coefficients = fit_quality_curve(means, quantizers)
        if not coefficients.any():
            logger.debug(
                f"Scene {scene_id[0]}-{scene_id[1]}: no usable curve from "
                f"{len(trials)} trials, using range maximum"
            )
        quantizer = solve_quantizer(coefficients, self.config.target_quality, self.config.range)
        return round_quantizer(self.config.encoder, quantizer)

    def solve(self, scenes: ScenesInfo) -> ScenesInfo:
        """Copy of ``scenes`` with stored statistics and final quantizers."""
        solved = scenes.model_copy(deep=True)
        for scene in solved.scenes:
            trials = self.store.trials(scene.scene_id)
            scene.quantizer_scores = trials or None
            scene.final_quantizer = self.solve_scene(scene.scene_id)
        return solved

    def run(
        self,
        reference: Path,
        trial_scenes: Path,
        scenes: ScenesInfo,
        base_path: Optional[Path] = None
    ) -> ScenesInfo:
        """Run all trials and solve every scene.

        Args:
            reference: Strided source encoded for trials and scored against
            trial_scenes: Scenes file splitting the strided source
            scenes: Scenes on the canonical timeline
            base_path: Trial outputs are named after it (default: reference)

        Returns:
            Scenes with ``quantizer_scores`` and ``final_quantizer`` set
        """
        base_path = base_path or reference
        for request in self.trial_requests(base_path):
            self.run_trial(request, reference, trial_scenes, scenes)
        solved = self.solve(scenes)
        for scene in solved.scenes:
            logger.debug(
                f"Scene {scene.start_frame}-{scene.end_frame}: "
                f"quantizer {scene.final_quantizer}"
            )
        return solved
