"""
Test fixtures package for hoststats tests.

This package provides a capturing logger, scripted vSphere stand-ins and
sample records for testing the collection pipeline without a vCenter.
"""

from tests.fixtures.mock_logger import MockLogger
from tests.fixtures.mock_vsphere import (
    EndpointScript,
    FakeSession,
    MockSessionFactory,
    MockHostCollector,
    make_vsphere_host,
    make_service_instance,
    connection_refused,
    lookup_failed,
    logout_failed,
)
from tests.fixtures.sample_data import (
    GB,
    SAMPLE_CONFIG_LEGACY,
    SAMPLE_CONFIG_YAML,
    make_host_stat,
    make_host_stats,
    make_config,
)

__all__ = [
    # Mock classes
    'MockLogger',
    'EndpointScript',
    'FakeSession',
    'MockSessionFactory',
    'MockHostCollector',
    'make_vsphere_host',
    'make_service_instance',
    'connection_refused',
    'lookup_failed',
    'logout_failed',
    # Sample data
    'GB',
    'SAMPLE_CONFIG_LEGACY',
    'SAMPLE_CONFIG_YAML',
    'make_host_stat',
    'make_host_stats',
    'make_config',
]
