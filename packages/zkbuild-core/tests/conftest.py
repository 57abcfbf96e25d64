"""Shared pytest fixtures for zkbuild-core tests.

This module provides common fixtures used across unit and
integration tests.
"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest
import structlog

from testing.fixtures.zksolc import FOO_SOL, write_project


@pytest.fixture(autouse=True)
def configure_structlog_for_tests() -> None:
    """Configure structlog to output to stdout for test capture.

    This fixture ensures structlog outputs to stdout so that capsys
    can capture the output in tests. Without this, structlog may use
    different processors depending on test execution order.
    """
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=False,  # Important for test isolation
    )


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    """Create a project with src/Foo.sol.

    Returns:
        Path to the project root.
    """
    return write_project(tmp_path / "project", {"src/Foo.sol": FOO_SOL})


@pytest.fixture
def compilers_dir(tmp_path: Path) -> Path:
    """Return a compilers directory path that does not exist yet."""
    return tmp_path / "zksync"


@pytest.fixture(autouse=True)
def clean_zkbuild_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove ZKBUILD_* variables so settings start from their defaults."""
    for name in (
        "ZKBUILD_COMPILERS_DIR",
        "ZKBUILD_ZKSOLC_DOWNLOAD_URL",
        "ZKBUILD_VERSION_PREFIXES",
        "ZKBUILD_DOWNLOAD_TIMEOUT",
    ):
        monkeypatch.delenv(name, raising=False)
