"""Collects worker scores into canonical frame order."""

import queue
import sys
from typing import Callable, Dict, Optional

from loguru import logger
from tqdm import tqdm

from ..config import default_config as defaults
from ..core.video.errors import ScoringAborted
from .pool import ScoringRun

# Decides whether to keep a partial result set: (collected, expected) -> continue?
RecoveryPolicy = Callable[[int, int], bool]


def always_continue(collected: int, expected: int) -> bool:
    return True


def always_abort(collected: int, expected: int) -> bool:
    return False


class RunningAverage:
    """Bounded moving average used for progress display.

    Each update moves the average by ``1/min(count, window)`` of the
    difference, so up to ``window`` samples it equals the plain mean and
    afterwards it tracks roughly the last ``window`` samples.
    """

    def __init__(self, window: int = defaults.RUNNING_AVERAGE_WINDOW):
        if window < 1:
            raise ValueError(f"Window must be positive: {window}")
        self.window = window
        self.count = 0
        self.value = 0.0

    def update(self, score: float) -> float:
        self.count += 1
        self.value += (score - self.value) / min(self.count, self.window)
        return self.value


class ResultAggregator:
    """Sole consumer of a scoring run's results.

    Args:
        cycle: Frame stride of the distorted source; indices are scaled by it
        recovery: Called when workers finish before all expected frames
            were scored; returning False aborts the round
        progress: Show a progress bar (default: when stderr is a terminal)
        poll_interval: Seconds between checks on worker state
    """

    def __init__(
        self,
        cycle: int = 1,
        recovery: RecoveryPolicy = always_continue,
        progress: Optional[bool] = None,
        poll_interval: float = 0.1
    ):
        if cycle < 1:
            raise ValueError(f"Cycle must be positive: {cycle}")
        self.cycle = cycle
        self.recovery = recovery
        self.progress = sys.stderr.isatty() if progress is None else progress
        self.poll_interval = poll_interval

    def collect(self, run: ScoringRun) -> Dict[int, float]:
        """Drain a scoring run.

        Returns:
            Scores keyed by canonical frame index, in ascending order

        Raises:
            ScoringAborted: If the recovery policy rejects a stalled round
        """
        scores: Dict[int, float] = {}
        average = RunningAverage()
        try:
            with tqdm(
                total=run.expected,
                desc="Scoring",
                unit="frame",
                file=sys.stderr,
                disable=not self.progress,
                postfix={"avg": "N/A"}
            ) as bar:
                while True:
                    try:
                        item = run.results.get(timeout=self.poll_interval)
                    except queue.Empty:
                        run.raise_errors()
                        # workers enqueue before finishing, so nothing is lost here
                        if run.in_flight() == 0 and run.results.empty():
                            break
                        continue
                    scores[item.frame_index * self.cycle] = item.score
                    bar.set_postfix(avg=f"{average.update(item.score):.2f}", refresh=False)
                    bar.update(1)
            run.raise_errors()
        finally:
            run.shutdown()

        if run.expected is not None and len(scores) < run.expected:
            logger.warning(
                f"All scoring workers finished but only {len(scores)} of "
                f"{run.expected} frames were scored"
            )
            if not self.recovery(len(scores), run.expected):
                raise ScoringAborted(len(scores), run.expected)
            logger.info("Continuing with partial scores")

        return dict(sorted(scores.items()))
