"""Shared test fixtures for zkbuild-cli tests.

Provides CliRunner fixtures, a throwaway compilers directory and a
project with a fake zksolc script, so commands run without the network.
"""

from __future__ import annotations

from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any

import pytest
import structlog
from click.testing import CliRunner

from testing.fixtures.zksolc import (
    FOO_SOL,
    FakeDownloader,
    write_fake_zksolc,
    write_project,
    zksolc_output,
)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Create a Click test runner.

    Returns:
        CliRunner instance for testing CLI commands.
    """
    return CliRunner()


@pytest.fixture(autouse=True)
def compilers_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Generator[Path, None, None]:
    """Point ZKBUILD_COMPILERS_DIR at a temporary directory.

    Keeps commands away from ~/.zksync and resets logging configured by
    the CLI entry point.

    Yields:
        Compilers directory path (not created).
    """
    directory = tmp_path / "zksync"
    monkeypatch.setenv("ZKBUILD_COMPILERS_DIR", str(directory))
    for name in (
        "ZKBUILD_ZKSOLC_DOWNLOAD_URL",
        "ZKBUILD_VERSION_PREFIXES",
        "ZKBUILD_DOWNLOAD_TIMEOUT",
    ):
        monkeypatch.delenv(name, raising=False)
    yield directory
    structlog.reset_defaults()


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """Create a project with src/Foo.sol.

    Returns:
        Project root.
    """
    return write_project(tmp_path / "project", {"src/Foo.sol": FOO_SOL})


@pytest.fixture
def fake_zksolc(tmp_path: Path) -> Callable[..., Path]:
    """Factory fixture writing fake zksolc scripts.

    Returns:
        Function taking the output document (and exit_code/stderr) and
        returning the script path.
    """
    counter = 0

    def _write(output: dict[str, Any] | None = None, **kwargs: Any) -> Path:
        nonlocal counter
        counter += 1
        if output is None:
            output = zksolc_output({"src/Foo.sol": ["Foo"]})
        return write_fake_zksolc(tmp_path / "bin" / f"zksolc-{counter}", output, **kwargs)

    return _write


@pytest.fixture
def fake_downloads(
    monkeypatch: pytest.MonkeyPatch, fake_zksolc: Callable[..., Path]
) -> FakeDownloader:
    """Replace BinaryDownloader with a FakeDownloader that installs a fake zksolc.

    Returns:
        The FakeDownloader every CompilerManager will use.
    """
    downloader = FakeDownloader(content=fake_zksolc().read_bytes())
    monkeypatch.setattr(
        "zkbuild_core.manager.manager.BinaryDownloader",
        lambda *args, **kwargs: downloader,
    )
    return downloader
