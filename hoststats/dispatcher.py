"""
Fixed-size worker pool that executes endpoint jobs.

Workers pull jobs from a bounded job queue, run the session lifecycle for each
one and put exactly one completion token (the job index) on the done queue per
job. A queue is closed by putting one CLOSED sentinel per worker on it after
the last job.

Usage:
    pool = WorkerPool(run_job, num_workers=4, logger=logger)
    pool.start(job_queue, done_queue)
    for job in jobs:
        job_queue.put(job)
    close_queue(job_queue, pool.num_workers)
    ...
    pool.join()
"""

import queue
import threading
from typing import Callable, List, Optional

from hoststats.jobs import EndpointJob, JobStatus


CLOSED = object()

JobRunner = Callable[[EndpointJob, int], EndpointJob]


def close_queue(job_queue: queue.Queue, num_workers: int) -> None:
    """Signal every worker that no further jobs will be submitted."""
    for _ in range(num_workers):
        job_queue.put(CLOSED)


class WorkerPool:
    """A fixed set of worker threads consuming jobs from a shared queue.

    Attributes:
        run_job: Callable executing one job on a given worker id.
        num_workers: Number of worker threads.
        logger: Logger instance for output.
    """

    def __init__(self, run_job: JobRunner, num_workers: int, logger, name: str = "hoststats-worker"):
        if num_workers < 1:
            raise ValueError(f"Worker pool needs at least one worker, got {num_workers}")
        self.run_job = run_job
        self.num_workers = num_workers
        self.logger = logger
        self.name = name
        self._threads: List[threading.Thread] = []

    def start(self, job_queue: queue.Queue, done_queue: queue.Queue) -> None:
        """Start the worker threads.

        Raises:
            RuntimeError: If the pool was already started.
        """
        if self._threads:
            raise RuntimeError("WorkerPool already started")

        for worker_id in range(self.num_workers):
            thread = threading.Thread(
                target=self._worker_loop,
                args=(worker_id, job_queue, done_queue),
                daemon=False,
                name=f"{self.name}-{worker_id}",
            )
            self._threads.append(thread)
            thread.start()
        self.logger.debug(f"Started {self.num_workers} workers")

    def _worker_loop(self, worker_id: int, job_queue: queue.Queue, done_queue: queue.Queue) -> None:
        while True:
            job = job_queue.get()
            if job is CLOSED:
                self.logger.debug(f"Worker {worker_id}: job queue closed, exiting")
                return

            self.logger.verbose(f"Worker {worker_id}: received job {job.name}")
            try:
                self.run_job(job, worker_id)
            except Exception as e:
                job.status = JobStatus.FAILED
                job.error = f"unexpected worker error: {e}"
                job.records = []
                self.logger.error(f"Worker {worker_id}: unexpected error on {job.name}: {e}")
            finally:
                done_queue.put(job.index)

    def join(self, timeout: Optional[float] = None) -> None:
        """Wait for every worker thread to exit."""
        for thread in self._threads:
            thread.join(timeout=timeout)

    @property
    def is_running(self) -> bool:
        return any(t.is_alive() for t in self._threads)
