"""Unit tests for the worker pool."""

import queue
import threading

import pytest

from hoststats.config import EndpointDefinition
from hoststats.dispatcher import CLOSED, WorkerPool, close_queue
from hoststats.jobs import EndpointJob, JobStatus, build_jobs


def _jobs(count):
    return build_jobs([EndpointDefinition(hostname=f"vc{i:02d}") for i in range(count)])


def _run_pool(pool, jobs):
    job_queue = queue.Queue(maxsize=len(jobs))
    done_queue = queue.Queue()
    pool.start(job_queue, done_queue)
    for job in jobs:
        job_queue.put(job)
    close_queue(job_queue, pool.num_workers)
    tokens = [done_queue.get(timeout=5) for _ in jobs]
    pool.join(timeout=5)
    return tokens, done_queue


class TestCloseQueue:
    """Tests for close_queue function."""

    def test_one_sentinel_per_worker(self):
        q = queue.Queue()
        close_queue(q, 3)
        assert [q.get_nowait() for _ in range(3)] == [CLOSED, CLOSED, CLOSED]
        assert q.empty()


class TestWorkerPool:
    """Tests for WorkerPool."""

    def test_rejects_zero_workers(self, mock_logger):
        with pytest.raises(ValueError):
            WorkerPool(lambda job, wid: job, 0, mock_logger)

    def test_one_token_per_job(self, mock_logger):
        jobs = _jobs(5)

        def run_job(job, worker_id):
            job.status = JobStatus.SUCCEEDED
            return job

        pool = WorkerPool(run_job, 2, mock_logger)
        tokens, done_queue = _run_pool(pool, jobs)

        assert sorted(tokens) == [0, 1, 2, 3, 4]
        assert done_queue.empty()
        assert not pool.is_running
        assert all(job.succeeded for job in jobs)

    def test_fewer_workers_than_jobs_uses_every_worker_id_in_range(self, mock_logger):
        seen = []
        lock = threading.Lock()

        def run_job(job, worker_id):
            with lock:
                seen.append(worker_id)
            return job

        pool = WorkerPool(run_job, 2, mock_logger)
        _run_pool(pool, _jobs(6))

        assert len(seen) == 6
        assert set(seen) <= {0, 1}

    def test_unexpected_exception_still_signals_completion(self, mock_logger):
        jobs = _jobs(3)

        def run_job(job, worker_id):
            if job.index == 1:
                raise RuntimeError("boom")
            job.status = JobStatus.SUCCEEDED
            return job

        pool = WorkerPool(run_job, 1, mock_logger)
        tokens, _ = _run_pool(pool, jobs)

        assert sorted(tokens) == [0, 1, 2]
        assert jobs[1].status == JobStatus.FAILED
        assert "boom" in jobs[1].error
        assert jobs[0].succeeded and jobs[2].succeeded
        mock_logger.error.assert_called_once()

    def test_start_twice_raises(self, mock_logger):
        pool = WorkerPool(lambda job, wid: job, 1, mock_logger)
        job_queue, done_queue = queue.Queue(), queue.Queue()
        pool.start(job_queue, done_queue)
        try:
            with pytest.raises(RuntimeError, match="already started"):
                pool.start(job_queue, done_queue)
        finally:
            close_queue(job_queue, 1)
            pool.join(timeout=5)

    def test_threads_are_named_and_not_daemon(self, mock_logger):
        pool = WorkerPool(lambda job, wid: job, 2, mock_logger, name="test-worker")
        job_queue, done_queue = queue.Queue(), queue.Queue()
        pool.start(job_queue, done_queue)
        try:
            assert [t.name for t in pool._threads] == ["test-worker-0", "test-worker-1"]
            assert not any(t.daemon for t in pool._threads)
        finally:
            close_queue(job_queue, 2)
            pool.join(timeout=5)


class TestBuildJobs:
    """Tests for build_jobs function."""

    def test_indices_follow_configuration_order(self):
        jobs = _jobs(3)
        assert [job.index for job in jobs] == [0, 1, 2]
        assert [job.name for job in jobs] == ["vc00", "vc01", "vc02"]
        assert all(job.status == JobStatus.PENDING for job in jobs)

    def test_job_defaults(self):
        job = EndpointJob(endpoint=EndpointDefinition(hostname="vc01"), index=0)
        assert job.records == []
        assert job.session is None
        assert not job.succeeded
