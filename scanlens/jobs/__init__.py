"""Background edge-detection jobs with generation tokens."""

from scanlens.jobs.runner import EdgeJob, EdgeJobRunner, JobStatus

__all__ = ["EdgeJob", "EdgeJobRunner", "JobStatus"]
