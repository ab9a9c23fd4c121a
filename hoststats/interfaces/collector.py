"""
Collector interface definitions for hoststats.

This module defines the abstract contracts between the collection pipeline
and the remote management API. The pipeline only ever talks to these
interfaces; protocol details live in the implementations (see
hoststats.vsphere).
"""

from abc import ABC, abstractmethod
from typing import Any, List

from hoststats.config import EndpointDefinition
from hoststats.records import HostStat


class SessionFactoryInterface(ABC):
    """Opens and releases authenticated sessions to endpoints.

    Example:
        class MySessionFactory(SessionFactoryInterface):
            def connect(self, endpoint):
                return open_api_session(endpoint.hostname, endpoint.username,
                                        endpoint.password)

            def disconnect(self, session):
                session.logout()
    """

    @abstractmethod
    def connect(self, endpoint: EndpointDefinition) -> Any:
        """Open a session to the endpoint.

        Args:
            endpoint: Address and credentials of the endpoint.

        Returns:
            An opaque session handle passed to the collector.

        Raises:
            EndpointConnectionError: On bad address, rejected credentials or
                network failure.
        """
        pass

    @abstractmethod
    def disconnect(self, session: Any) -> None:
        """Release a session.

        Raises:
            DisconnectWarning: If the release failed. Callers log and continue.
        """
        pass


class HostCollectorInterface(ABC):
    """Enumerates the physical hosts behind a session."""

    @abstractmethod
    def collect(self, session: Any) -> List[HostStat]:
        """Produce one HostStat per physical host.

        No host ordering is guaranteed.

        Args:
            session: Handle returned by SessionFactoryInterface.connect().

        Returns:
            List of records, one per host.

        Raises:
            CollectionError: If discovery or any cluster lookup fails. No
                partial result is returned.
        """
        pass

    def get_collection_method(self) -> str:
        """Return the name of the collection method (e.g. 'vsphere')."""
        return "unknown"
