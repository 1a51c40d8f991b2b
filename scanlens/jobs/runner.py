"""
Run detect_edges off the caller's thread.

Each submit() takes the next generation token. When a job finishes after a
newer one was submitted, its result is discarded and the job marked stale,
so a viewer that switched images never applies an outdated mask.
"""

from __future__ import annotations

import threading
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Optional

from scanlens.anchors.summarize import AnchorStrategy
from scanlens.edges.canny import detect_edges
from scanlens.hysteresis.link import ThresholdPolicy
from scanlens.types import EdgeDetectionResult, RasterImage
from scanlens.utils import setup_logger

logger = setup_logger("jobs")

Detector = Callable[..., EdgeDetectionResult]

# Finished jobs kept for status lookups; older ones are forgotten.
MAX_FINISHED_JOBS = 16


class JobStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETE = "complete"
    STALE = "stale"
    ERROR = "error"


@dataclass
class EdgeJob:
    """One pipeline invocation tracked by the runner."""

    id: str
    generation: int
    status: JobStatus = JobStatus.PENDING
    result: Optional[EdgeDetectionResult] = None
    error: Optional[str] = None
    done: threading.Event = field(default_factory=threading.Event, repr=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "job_id": self.id,
            "generation": self.generation,
            "status": self.status.value,
            "error": self.error,
        }


class EdgeJobRunner:
    """
    Thread-per-job runner. Jobs share no buffers; only bookkeeping is locked.

    Only the newest completed job holds a result. Once a newer job completes,
    the previous one drops its result and turns stale. At most `max_finished`
    finished jobs stay retrievable through get().
    """

    def __init__(
        self,
        thresholds: ThresholdPolicy | None = None,
        strategy: AnchorStrategy | None = None,
        on_result: Callable[[EdgeJob], None] | None = None,
        detector: Detector = detect_edges,
        max_finished: int = MAX_FINISHED_JOBS,
    ):
        self.thresholds = thresholds
        self.strategy = strategy
        self.on_result = on_result
        self._detector = detector
        self.max_finished = max_finished
        self._lock = threading.Lock()
        self._generation = 0
        self._jobs: dict[str, EdgeJob] = {}
        self._latest: EdgeJob | None = None

    @property
    def current_generation(self) -> int:
        with self._lock:
            return self._generation

    def submit(self, raster: RasterImage) -> EdgeJob:
        """Start a job for raster; supersedes every earlier job."""
        with self._lock:
            self._generation += 1
            job = EdgeJob(id=str(uuid.uuid4()), generation=self._generation)
            self._jobs[job.id] = job

        thread = threading.Thread(target=self._run, args=(job, raster), daemon=True)
        thread.start()
        return job

    def _run(self, job: EdgeJob, raster: RasterImage) -> None:
        job.status = JobStatus.RUNNING
        deliver = False
        try:
            try:
                result = self._detector(raster, thresholds=self.thresholds, strategy=self.strategy)
            except Exception as e:
                logger.error(f"Job {job.id} (gen {job.generation}) failed: {e}")
                job.error = str(e)
                job.status = JobStatus.ERROR
            else:
                with self._lock:
                    if job.generation < self._generation:
                        job.status = JobStatus.STALE
                        logger.warning(
                            f"Job {job.id} finished as gen {job.generation}, "
                            f"newest is {self._generation}; result discarded"
                        )
                    else:
                        previous = self._latest
                        if previous is not None and previous is not job:
                            previous.result = None
                            previous.status = JobStatus.STALE
                        job.result = result
                        job.status = JobStatus.COMPLETE
                        self._latest = job
                        deliver = True

            if deliver and self.on_result is not None:
                self.on_result(job)
        finally:
            with self._lock:
                self._prune()
            job.done.set()

    def _prune(self) -> None:
        """Forget the oldest finished jobs beyond max_finished. Caller holds the lock."""
        finished = [
            job_id for job_id, job in self._jobs.items()
            if job.done.is_set() and job is not self._latest
        ]
        excess = len(finished) - self.max_finished
        for job_id in finished[:max(excess, 0)]:
            del self._jobs[job_id]

    def get(self, job_id: str) -> EdgeJob:
        with self._lock:
            if job_id not in self._jobs:
                raise KeyError(f"Job {job_id} not found")
            return self._jobs[job_id]

    def wait(self, job_id: str, timeout: float | None = None) -> EdgeJob:
        """Block until the job finishes (or timeout). Returns the job either way."""
        job = self.get(job_id)
        job.done.wait(timeout)
        return job

    def latest(self) -> EdgeDetectionResult | None:
        """Result for the newest submission, or None while it is still pending or failed."""
        with self._lock:
            if self._latest is None or self._latest.generation != self._generation:
                return None
            return self._latest.result
