import threading

import numpy as np
import pytest

from scanlens.edges.canny import detect_edges
from scanlens.jobs.runner import EdgeJobRunner, JobStatus
from scanlens.types import RasterImage
from tests.conftest import make_raster, step_image


def test_single_job_completes(step_raster):
    delivered = []
    runner = EdgeJobRunner(on_result=delivered.append)
    job = runner.submit(step_raster)

    runner.wait(job.id, timeout=10)
    assert job.status == JobStatus.COMPLETE
    assert job.generation == 1
    assert job.result is not None and job.result.bounding_box is not None
    assert runner.latest() is job.result
    assert delivered == [job]


def test_superseded_job_is_discarded():
    release = threading.Event()
    delivered = []

    def detector(raster, **kwargs):
        if raster.width == 24:
            release.wait(10)
        return detect_edges(raster, **kwargs)

    runner = EdgeJobRunner(on_result=delivered.append, detector=detector)
    old = runner.submit(make_raster(step_image(24, 24, column=12)))
    new = runner.submit(make_raster(step_image(32, 32, column=16)))

    runner.wait(new.id, timeout=10)
    release.set()
    runner.wait(old.id, timeout=10)

    assert old.generation < new.generation
    assert new.status == JobStatus.COMPLETE
    assert old.status == JobStatus.STALE
    assert old.result is None
    assert runner.latest() is new.result
    assert delivered == [new]


def test_latest_is_none_while_newest_pending(step_raster):
    release = threading.Event()

    def detector(raster, **kwargs):
        if raster.width == 8:
            release.wait(10)
        return detect_edges(raster, **kwargs)

    runner = EdgeJobRunner(detector=detector)
    first = runner.submit(step_raster)
    runner.wait(first.id, timeout=10)
    assert runner.latest() is first.result

    pending = runner.submit(make_raster(np.zeros((8, 8), dtype=np.uint8)))
    assert runner.latest() is None
    release.set()
    runner.wait(pending.id, timeout=10)
    assert runner.latest() is pending.result


def test_invalid_raster_marks_job_error():
    runner = EdgeJobRunner()
    job = runner.submit(RasterImage(width=3, height=3, pixels=b"\x00" * 5))
    runner.wait(job.id, timeout=10)

    assert job.status == JobStatus.ERROR
    assert "expected" in job.error
    assert job.result is None
    assert runner.latest() is None


def test_unknown_job_id():
    with pytest.raises(KeyError):
        EdgeJobRunner().get("missing")


def test_generations_increase(black_raster):
    runner = EdgeJobRunner()
    jobs = [runner.submit(black_raster) for _ in range(3)]
    for job in jobs:
        runner.wait(job.id, timeout=10)
    assert [j.generation for j in jobs] == [1, 2, 3]
    assert runner.current_generation == 3
    assert jobs[-1].status == JobStatus.COMPLETE


def test_only_newest_completed_job_holds_result(step_raster):
    runner = EdgeJobRunner()
    jobs = []
    for _ in range(5):
        job = runner.submit(step_raster)
        runner.wait(job.id, timeout=10)
        jobs.append(job)

    held = [j for j in jobs if j.result is not None]
    assert held == [jobs[-1]]
    assert all(j.status == JobStatus.STALE for j in jobs[:-1])
    assert runner.latest() is jobs[-1].result


def test_finished_jobs_are_pruned_beyond_cap(black_raster):
    runner = EdgeJobRunner(max_finished=2)
    jobs = []
    for _ in range(5):
        job = runner.submit(black_raster)
        runner.wait(job.id, timeout=10)
        jobs.append(job)

    assert len(runner._jobs) == 3
    assert runner.get(jobs[-1].id) is jobs[-1]
    assert runner.get(jobs[-2].id) is jobs[-2]
    with pytest.raises(KeyError):
        runner.get(jobs[0].id)
