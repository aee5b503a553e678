"""Frame scorer pool.

Worker threads share one decode cursor. A worker holds the cursor lock only
while reading the next frame from each decoder, then scores the pair
without the lock so decoding and scoring overlap across workers.
"""

import queue
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Type

import numpy as np
import psutil
from loguru import logger

from ..core.video.types import Frame, FrameScore, YuvConfig
from ..decoding.base import FrameDecoder
from .metric import FrameMetric, select_sample_types


def default_thread_count() -> int:
    """Half the CPUs this process may run on, at least one."""
    process = psutil.Process()
    if hasattr(process, "cpu_affinity"):
        cpus = len(process.cpu_affinity())
    else:
        # no affinity API on macOS
        cpus = psutil.cpu_count(logical=True) or 1
    return max(1, cpus // 2)


class DecodeCursor:
    """Lock-guarded pair of sequential decoders.

    The decoders are never exposed; the only operation is reading the next
    aligned pair and advancing the shared index.
    """

    def __init__(
        self,
        reference: FrameDecoder,
        distorted: FrameDecoder,
        sample_types: Optional[Tuple[Type[np.integer], Type[np.integer]]] = None
    ):
        self._reference = reference
        self._distorted = distorted
        self._types = sample_types or select_sample_types(
            reference.bit_depth, distorted.bit_depth
        )
        self._lock = threading.Lock()
        self._index = 0
        self._exhausted = False

    @property
    def position(self) -> int:
        with self._lock:
            return self._index

    def read_next_pair(self) -> Optional[Tuple[int, Frame, Frame]]:
        """Read one frame from each decoder.

        Returns:
            (index, reference frame, distorted frame), or None once either
            decoder reaches end of stream
        """
        with self._lock:
            if self._exhausted:
                return None
            reference = self._reference.read_frame(self._types[0])
            distorted = None
            if reference is not None:
                distorted = self._distorted.read_frame(self._types[1])
            if reference is None or distorted is None:
                self._exhausted = True
                return None
            index = self._index
            self._index += 1
        return index, reference, distorted


@dataclass
class ScoringRun:
    """Handle on a started scoring round.

    Attributes:
        results: Scores in completion order
        workers: One future per worker thread
        expected: Number of pairs expected, when both sources declare it
    """
    results: "queue.Queue[FrameScore]"
    workers: List[Future]
    expected: Optional[int]
    executor: ThreadPoolExecutor = field(repr=False)

    def in_flight(self) -> int:
        """Number of workers still running."""
        return sum(1 for worker in self.workers if not worker.done())

    def raise_errors(self) -> None:
        """Re-raise the first exception of a finished worker."""
        for worker in self.workers:
            if worker.done():
                worker.result()

    def shutdown(self) -> None:
        self.executor.shutdown(wait=True)


class FrameScorerPool:
    """Scores aligned frame pairs from two decoders on worker threads.

    Args:
        metric: Metric applied to each frame pair
        reference_config: Color description of the reference
        distorted_config: Color description of the distorted source
        threads: Worker count (default: half the logical CPUs)
    """

    def __init__(
        self,
        metric: FrameMetric,
        reference_config: YuvConfig,
        distorted_config: YuvConfig,
        threads: Optional[int] = None
    ):
        self.metric = metric
        self.reference_config = reference_config
        self.distorted_config = distorted_config
        self.threads = max(1, threads or default_thread_count())

    def _work(self, cursor: DecodeCursor, results: "queue.Queue[FrameScore]") -> int:
        scored = 0
        while True:
            pair = cursor.read_next_pair()
            if pair is None:
                return scored
            index, reference, distorted = pair
            score = self.metric.score(
                reference, distorted, self.reference_config, self.distorted_config
            )
            results.put(FrameScore(index, score))
            scored += 1

    def start(self, reference: FrameDecoder, distorted: FrameDecoder) -> ScoringRun:
        """Start workers over a fresh cursor and return immediately."""
        reference_count = reference.frame_count()
        distorted_count = distorted.frame_count()
        if (reference_count is not None and distorted_count is not None
                and reference_count != distorted_count):
            logger.warning(
                f"Frame count mismatch: reference has {reference_count}, "
                f"distorted has {distorted_count}; scores may be inaccurate"
            )
        known = [c for c in (reference_count, distorted_count) if c is not None]
        expected = min(known) if known else None

        cursor = DecodeCursor(reference, distorted)
        results: "queue.Queue[FrameScore]" = queue.Queue()
        executor = ThreadPoolExecutor(
            max_workers=self.threads, thread_name_prefix="scorer"
        )
        logger.debug(f"Starting {self.threads} scoring threads")
        workers = [
            executor.submit(self._work, cursor, results) for _ in range(self.threads)
        ]
        return ScoringRun(results=results, workers=workers, expected=expected,
                          executor=executor)
