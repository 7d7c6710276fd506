"""
Test configuration and fixtures for the Lern startup layer.

This module provides:
- Isolated environment mappings for resolver tests
- Sample configuration trees and appsettings directories
- Recording sleep functions and flaky actions for retry tests
- SQLite (aiosqlite) database settings for readiness tests
"""

import logging
import tempfile
from pathlib import Path
from typing import Any, Dict, Generator, List

import pytest
import yaml

from lern_startup.config import ConfigResolver, ConfigTree, DatabaseSettings


SAMPLE_TREE: Dict[str, Any] = {
    "Environment": "Development",
    "SmtpHost": "mail.lern.local",
    "SmtpPort": 587,
    "SmtpSsl": True,
    "GzipEnabled": True,
    "GzipMinimumBytes": 2048,
    "GzipMimeTypes": ["text/html", "application/json", "text/css"],
    "StartupRetryDelay": "00:00:02",
    "EmptySection": [],
    "Database": {
        "Host": "db.internal",
        "Port": 5433,
    },
}


@pytest.fixture
def environ() -> Dict[str, str]:
    """Empty environment mapping, isolated from the real process environment."""
    return {}


@pytest.fixture
def sample_tree() -> ConfigTree:
    """Structured configuration tree with a mix of scalar and list keys."""
    return ConfigTree(SAMPLE_TREE)


@pytest.fixture
def resolver(sample_tree, environ) -> ConfigResolver:
    """Resolver over the sample tree and the isolated environment."""
    return ConfigResolver(sample_tree, environ)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create temporary directory for test files."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def config_dir(temp_dir) -> Path:
    """Directory with a base appsettings.yaml and a Production overlay."""
    (temp_dir / "appsettings.yaml").write_text(yaml.safe_dump({
        "Environment": "Development",
        "DatabaseHost": "localhost",
        "DatabasePort": 5432,
        "LogLevel": "DEBUG",
        "GzipMimeTypes": ["text/html", "text/css"],
        "Smtp": {"Host": "localhost", "Port": 25},
    }), encoding="utf-8")
    (temp_dir / "appsettings.Production.yaml").write_text(yaml.safe_dump({
        "DatabaseHost": "db.prod.internal",
        "LogLevel": "WARNING",
        "GzipMimeTypes": ["application/json"],
        "Smtp": {"Port": 465},
    }), encoding="utf-8")
    return temp_dir


@pytest.fixture
def sqlite_settings() -> DatabaseSettings:
    """In-memory SQLite database settings."""
    return DatabaseSettings(url="sqlite+aiosqlite:///:memory:")


class RecordingSleep:
    """Sleep stand-in that records requested delays instead of waiting."""

    def __init__(self):
        self.calls: List[float] = []

    def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


class AsyncRecordingSleep(RecordingSleep):
    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


class FlakyAction:
    """Action failing a fixed number of times before succeeding."""

    def __init__(self, failures: int, error_factory=lambda n: ConnectionError(f"failure {n}")):
        self.failures = failures
        self.error_factory = error_factory
        self.calls = 0

    def __call__(self) -> None:
        self.calls += 1
        if self.calls <= self.failures:
            raise self.error_factory(self.calls)


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def async_recording_sleep() -> AsyncRecordingSleep:
    return AsyncRecordingSleep()


@pytest.fixture
def make_flaky():
    """Factory for FlakyAction instances."""
    return FlakyAction


@pytest.fixture
def restore_root_logger():
    """Keep the root logger configuration intact across tests that call setup_logging."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield root
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


# Pytest configuration
def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
