"""
Shared test fixtures and configuration.
"""

import logging

import pytest

from pkgpilot.adapters.mock import MockCommandRunner
from pkgpilot.adapters.packages.apt import AptPackageManager


@pytest.fixture
def mock_runner() -> MockCommandRunner:
    """A runner that succeeds with empty output unless scripted."""
    return MockCommandRunner()


@pytest.fixture
def apt(mock_runner: MockCommandRunner) -> AptPackageManager:
    """Apt backend with stock paths wired to the mock runner."""
    return AptPackageManager(mock_runner)


@pytest.fixture(autouse=True)
def _reset_root_logger():
    """Drop handlers installed by setup_logging() during a test."""
    root = logging.getLogger()
    level = root.level
    yield
    for handler in list(root.handlers):
        if isinstance(handler, logging.FileHandler) or type(handler) is logging.StreamHandler:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)
