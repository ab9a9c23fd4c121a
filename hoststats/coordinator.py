"""
Collection coordinator.

The coordinator runs one collection pass in two phases:

1. Dispatch: every endpoint job is pushed onto a bounded job queue consumed
   by the worker pool. The coordinator then blocks until it has received
   exactly one completion token per job (the completion barrier).
2. Merge: jobs are visited in configuration order, never completion order,
   and their rows are appended to the sink.

The sink is only touched before the workers start (header row) and after the
barrier, so no two threads ever write to it.
"""

import queue
import threading
from dataclasses import dataclass, field
from typing import List, Optional

from hoststats.config import Configuration
from hoststats.dispatcher import WorkerPool, close_queue
from hoststats.interfaces.collector import HostCollectorInterface, SessionFactoryInterface
from hoststats.jobs import EndpointJob, JobStatus, build_jobs
from hoststats.progress import completion_progress
from hoststats.records import flatten, headers
from hoststats.session import SessionLifecycle
from hoststats.sink import TabularSink


@dataclass
class RunSummary:
    """Outcome of one collection pass.

    Attributes:
        output_path: Destination the rows were written to.
        jobs: Every job, in configuration order.
        rows_written: Number of data rows appended to the sink.
        completions: Number of completion tokens received at the barrier.
    """
    output_path: str
    jobs: List[EndpointJob] = field(default_factory=list)
    rows_written: int = 0
    completions: int = 0

    @property
    def endpoint_count(self) -> int:
        return len(self.jobs)

    @property
    def failed_jobs(self) -> List[EndpointJob]:
        return [job for job in self.jobs if not job.succeeded]

    @property
    def succeeded_count(self) -> int:
        return sum(1 for job in self.jobs if job.succeeded)

    @property
    def cancelled(self) -> bool:
        return any(job.status == JobStatus.CANCELLED for job in self.jobs)


class Coordinator:
    """Submits endpoint jobs, waits for all of them and merges the results.

    Attributes:
        config: Loaded configuration (output path and endpoints).
        session_factory: Opens and releases endpoint sessions.
        collector: Produces records from an open session.
        sink: Tabular destination for the merged rows.
        logger: Logger instance for output.
        workers: Pool size. Defaults to config.workers, then to one worker
            per endpoint. Never larger than the number of endpoints.
        cancel_event: When set, jobs that have not yet connected or
            collected end as CANCELLED.
    """

    def __init__(
        self,
        config: Configuration,
        session_factory: SessionFactoryInterface,
        collector: HostCollectorInterface,
        sink: TabularSink,
        logger,
        workers: Optional[int] = None,
        cancel_event: Optional[threading.Event] = None,
    ):
        self.config = config
        self.session_factory = session_factory
        self.collector = collector
        self.sink = sink
        self.logger = logger
        self.workers = workers or config.workers
        self.cancel_event = cancel_event or threading.Event()

    def _pool_size(self, job_count: int) -> int:
        if not self.workers:
            return job_count
        return max(1, min(self.workers, job_count))

    def _run_job(self, job: EndpointJob, worker_id: int) -> EndpointJob:
        lifecycle = SessionLifecycle(
            job,
            self.session_factory,
            self.collector,
            self.logger,
            cancel_event=self.cancel_event,
            worker_id=worker_id,
        )
        return lifecycle.run()

    def run(self) -> RunSummary:
        """Run one collection pass.

        Returns:
            RunSummary describing every endpoint.

        Raises:
            SinkWriteError: If the destination cannot be written. Rows of
                endpoints merged before the failure stay in the file.
        """
        jobs = build_jobs(self.config.endpoints)
        self.logger.status(f"{len(jobs)} endpoints to collect data from in config")
        self.logger.verbose(f"Collection method: {self.collector.get_collection_method()}")

        self.sink.initialize(headers())

        completions = self._dispatch(jobs)
        rows_written = self._merge(jobs)

        summary = RunSummary(
            output_path=self.sink.path,
            jobs=jobs,
            rows_written=rows_written,
            completions=completions,
        )
        self.logger.status(
            f"Results saved to {summary.output_path}: {summary.endpoint_count} endpoints processed, "
            f"{summary.rows_written} rows written, {len(summary.failed_jobs)} failed"
        )
        return summary

    def _dispatch(self, jobs: List[EndpointJob]) -> int:
        """Run every job on the worker pool and wait for all completions."""
        job_count = len(jobs)
        if job_count == 0:
            return 0

        num_workers = self._pool_size(job_count)
        job_queue: queue.Queue = queue.Queue(maxsize=job_count)
        done_queue: queue.Queue = queue.Queue()

        pool = WorkerPool(self._run_job, num_workers, self.logger)
        pool.start(job_queue, done_queue)

        self.logger.verbose(f"Submitting {job_count} jobs to {num_workers} workers")
        for job in jobs:
            job_queue.put(job)
        close_queue(job_queue, num_workers)

        completions = 0
        with completion_progress("Collecting host statistics", job_count, self.logger) as advance:
            while completions < job_count:
                index = done_queue.get()
                completions += 1
                advance(jobs[index].name)

        pool.join()
        return completions

    def _merge(self, jobs: List[EndpointJob]) -> int:
        """Append each job's rows to the sink in configuration order."""
        self.logger.verbose("Merging results...")
        rows_written = 0
        for job in jobs:
            if job.succeeded:
                self.logger.result(
                    f"{job.name}: worker {job.worker_id} got {job.row_count} results"
                )
            else:
                code = f"[{job.error_code.value}] " if job.error_code else ""
                self.logger.error(f"{job.name}: no results ({job.status.value}: {code}{job.error})")

            rows = [flatten(record) for record in job.records]
            self.sink.append(rows)
            rows_written += len(rows)
        return rows_written
