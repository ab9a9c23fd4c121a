"""Endpoint jobs: the unit of work handed to the worker pool."""

import enum
from dataclasses import dataclass, field
from typing import Any, List, Optional

from hoststats.config import EndpointDefinition
from hoststats.errors import ErrorCode
from hoststats.records import HostStat


class JobStatus(enum.Enum):
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass
class EndpointJob:
    """
    Runtime wrapper around one EndpointDefinition.

    The job is owned by exactly one worker while it runs. ``session`` is only
    set between connect and disconnect. ``records`` is assigned once, by the
    executing worker, when collection succeeds; the coordinator reads it only
    after every job has signalled completion.

    Attributes:
        endpoint: Address and credentials of the endpoint.
        index: Position of the endpoint in the configuration, used for the
            final export order.
        session: Open session handle, or None.
        records: Records collected from the endpoint.
        status: Terminal outcome of the job.
        error: Failure reason, if any.
        error_code: ErrorCode of the failure, if known.
        worker_id: Worker that executed the job.
        duration_seconds: Wall time spent in the session lifecycle.
    """
    endpoint: EndpointDefinition
    index: int
    session: Optional[Any] = field(default=None, repr=False)
    records: List[HostStat] = field(default_factory=list, repr=False)
    status: JobStatus = JobStatus.PENDING
    error: Optional[str] = None
    error_code: Optional[ErrorCode] = None
    worker_id: Optional[int] = None
    duration_seconds: float = 0.0

    @property
    def name(self) -> str:
        return self.endpoint.identity

    @property
    def succeeded(self) -> bool:
        return self.status == JobStatus.SUCCEEDED

    @property
    def row_count(self) -> int:
        return len(self.records)


def build_jobs(endpoints: List[EndpointDefinition]) -> List[EndpointJob]:
    """Wrap endpoint definitions in jobs numbered in configuration order."""
    return [EndpointJob(endpoint=endpoint, index=i) for i, endpoint in enumerate(endpoints)]
