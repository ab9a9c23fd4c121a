"""
Session lifecycle for a single endpoint.

One SessionLifecycle drives one EndpointJob through

    IDLE -> CONNECTING -> CONNECTED -> COLLECTING -> DISCONNECTING -> CLOSED

with FAILED reachable from CONNECTING or COLLECTING. Endpoint-level failures
never escape run(): they end in FAILED (or CANCELLED) with zero records so
the job can always signal completion.
"""

import enum
import threading
import time
from typing import List, Optional

from hoststats.errors import CollectionError, DisconnectWarning, EndpointConnectionError, ErrorCode
from hoststats.interfaces.collector import HostCollectorInterface, SessionFactoryInterface
from hoststats.jobs import EndpointJob, JobStatus
from hoststats.records import HostStat


class SessionState(enum.Enum):
    IDLE = "idle"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    COLLECTING = "collecting"
    DISCONNECTING = "disconnecting"
    CLOSED = "closed"
    FAILED = "failed"


_TRANSITIONS = {
    SessionState.IDLE: {SessionState.CONNECTING},
    SessionState.CONNECTING: {SessionState.CONNECTED, SessionState.FAILED},
    SessionState.CONNECTED: {SessionState.COLLECTING},
    SessionState.COLLECTING: {SessionState.DISCONNECTING, SessionState.FAILED},
    SessionState.DISCONNECTING: {SessionState.CLOSED},
    SessionState.CLOSED: set(),
    SessionState.FAILED: set(),
}

TERMINAL_STATES = (SessionState.CLOSED, SessionState.FAILED)


class SessionLifecycle:
    """Runs connect, collect and disconnect for one endpoint job.

    Attributes:
        job: The job being executed. Exclusively owned by this lifecycle.
        state: Current SessionState.
        history: Every state visited, in order.
    """

    def __init__(
        self,
        job: EndpointJob,
        session_factory: SessionFactoryInterface,
        collector: HostCollectorInterface,
        logger,
        cancel_event: Optional[threading.Event] = None,
        worker_id: Optional[int] = None,
    ):
        self.job = job
        self.session_factory = session_factory
        self.collector = collector
        self.logger = logger
        self.cancel_event = cancel_event
        self.worker_id = worker_id
        self.state = SessionState.IDLE
        self.history: List[SessionState] = [SessionState.IDLE]

    @property
    def _prefix(self) -> str:
        if self.worker_id is None:
            return f"{self.job.name}"
        return f"Worker {self.worker_id}: {self.job.name}"

    def _transition(self, new_state: SessionState) -> None:
        if new_state not in _TRANSITIONS[self.state]:
            raise RuntimeError(
                f"Invalid session transition {self.state.name} -> {new_state.name}"
            )
        self.logger.debug(f"{self._prefix}: {self.state.name} -> {new_state.name}")
        self.state = new_state
        self.history.append(new_state)

    def _cancelled(self) -> bool:
        return self.cancel_event is not None and self.cancel_event.is_set()

    def _fail(self, status: JobStatus, reason: str, code: Optional[ErrorCode] = None) -> None:
        self._transition(SessionState.FAILED)
        self.job.status = status
        self.job.error = reason
        self.job.error_code = code
        self.job.records = []

    def run(self) -> EndpointJob:
        """Drive the job to a terminal state and return it."""
        self.job.worker_id = self.worker_id
        start = time.monotonic()
        try:
            self._run()
        finally:
            self.job.duration_seconds = time.monotonic() - start
        return self.job

    def _run(self) -> None:
        if not self._connect():
            return

        try:
            records = self._collect()
        except BaseException:
            self._release()
            raise

        if records is None:
            self._release()
            return

        self.job.records = records
        self.job.status = JobStatus.SUCCEEDED
        self._transition(SessionState.DISCONNECTING)
        self._release()
        self._transition(SessionState.CLOSED)
        self.logger.verbose(f"{self._prefix}: done, {len(records)} hosts collected")

    def _connect(self) -> bool:
        self._transition(SessionState.CONNECTING)
        if self._cancelled():
            self._fail(JobStatus.CANCELLED, "cancelled before connect", ErrorCode.COLLECT_CANCELLED)
            self.logger.warning(f"{self._prefix}: cancelled before connecting")
            return False

        self.logger.verbose(f"{self._prefix}: connecting")
        try:
            self.job.session = self.session_factory.connect(self.job.endpoint)
        except EndpointConnectionError as e:
            self._fail(JobStatus.FAILED, _reason(e), e.code)
            self.logger.error(f"{self._prefix}: could not initialize connection: {_reason(e)}")
            return False
        except Exception as e:
            self._fail(JobStatus.FAILED, f"connection failed: {e}")
            self.logger.error(f"{self._prefix}: could not initialize connection: {e}")
            return False

        self._transition(SessionState.CONNECTED)
        return True

    def _collect(self) -> Optional[List[HostStat]]:
        self._transition(SessionState.COLLECTING)
        if self._cancelled():
            self._fail(JobStatus.CANCELLED, "cancelled before collection", ErrorCode.COLLECT_CANCELLED)
            self.logger.warning(f"{self._prefix}: cancelled before collecting")
            return None

        self.logger.verbose(f"{self._prefix}: collecting data")
        try:
            return list(self.collector.collect(self.job.session))
        except CollectionError as e:
            self._fail(JobStatus.FAILED, _reason(e), e.code)
            self.logger.error(f"{self._prefix}: collection failed, discarding results: {_reason(e)}")
        except Exception as e:
            self._fail(JobStatus.FAILED, f"collection failed: {e}")
            self.logger.error(f"{self._prefix}: collection failed, discarding results: {e}")
        return None

    def _release(self) -> None:
        session, self.job.session = self.job.session, None
        if session is None:
            return
        try:
            self.session_factory.disconnect(session)
        except DisconnectWarning as w:
            self.logger.warning(f"{self._prefix}: could not disconnect properly: {_reason(w)}")
        except Exception as e:
            self.logger.warning(f"{self._prefix}: could not disconnect properly: {e}")


def _reason(error) -> str:
    if getattr(error, 'cause', None):
        return f"{error.message} ({error.cause})"
    return error.message
