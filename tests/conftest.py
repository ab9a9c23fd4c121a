"""
Shared pytest fixtures for hoststats tests.

These fixtures provide loggers, sample configurations and scripted vSphere
stand-ins so that the pipeline can be tested without a vCenter.
"""

import json
from argparse import Namespace
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from tests.fixtures import (
    MockHostCollector,
    MockLogger,
    MockSessionFactory,
    SAMPLE_CONFIG_LEGACY,
)


# =============================================================================
# Logger Fixtures
# =============================================================================

@pytest.fixture
def mock_logger():
    """
    Create a MagicMock logger with every hoststats log level.

    Usage:
        def test_something(mock_logger):
            some_function(logger=mock_logger)
            mock_logger.status.assert_called_with("expected message")
    """
    logger = MagicMock()
    for level in ['debug', 'info', 'warning', 'error', 'critical',
                  'status', 'verbose', 'verboser', 'ridiculous', 'result']:
        setattr(logger, level, MagicMock())
    return logger


@pytest.fixture
def capturing_logger() -> MockLogger:
    """Create a thread-safe logger that captures messages per level."""
    return MockLogger()


# =============================================================================
# Pipeline Fixtures
# =============================================================================

@pytest.fixture
def session_factory() -> MockSessionFactory:
    return MockSessionFactory()


@pytest.fixture
def host_collector(session_factory) -> MockHostCollector:
    return MockHostCollector(session_factory)


@pytest.fixture
def output_csv(tmp_path) -> Path:
    return tmp_path / "hoststats.csv"


# =============================================================================
# Config Fixtures
# =============================================================================

@pytest.fixture
def legacy_config_file(tmp_path) -> Path:
    """Write a JSON config in the historical Outpath/VCenters layout."""
    data = dict(SAMPLE_CONFIG_LEGACY)
    data["Outpath"] = str(tmp_path / "hoststats.csv")
    path = tmp_path / "config.json"
    path.write_text(json.dumps(data))
    return path


@pytest.fixture
def base_args(legacy_config_file) -> Namespace:
    """Parsed CLI arguments as produced by cli_parser with no flags."""
    return Namespace(
        config_file=str(legacy_config_file),
        output=None,
        workers=None,
        debug=False,
        verbose=False,
        stream_log_level=None,
        log_file=None,
        no_summary_table=True,
        what_if=False,
    )


# =============================================================================
# Environment Fixtures
# =============================================================================

@pytest.fixture
def clean_env(monkeypatch):
    """Remove hoststats environment variables for the duration of a test."""
    for var in ['HOSTSTATS_DEBUG', 'VC01_PASSWORD']:
        monkeypatch.delenv(var, raising=False)
    return monkeypatch
