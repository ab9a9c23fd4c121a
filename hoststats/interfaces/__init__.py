"""
Interface definitions for hoststats.

Collector Interfaces:
    - SessionFactoryInterface: opens and releases endpoint sessions
    - HostCollectorInterface: turns an open session into HostStat records

Example Usage:
    from hoststats.interfaces import HostCollectorInterface

    class StaticCollector(HostCollectorInterface):
        def collect(self, session):
            return list(session.records)
"""

from hoststats.interfaces.collector import (
    SessionFactoryInterface,
    HostCollectorInterface,
)

__all__ = [
    'SessionFactoryInterface',
    'HostCollectorInterface',
]
