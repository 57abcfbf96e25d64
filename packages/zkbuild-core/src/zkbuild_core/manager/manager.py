"""CompilerManager: turn a version spec into a ready-to-run zksolc path.

Typical sequence, as used by the build pipeline::

    manager = CompilerManager.build(CompilerManagerOptions(version="solc:1.3.9"))
    manager.check_setup_compilers_dir()
    if not manager.exists():
        manager.download()
    compiler_path = manager.get_full_compiler_path()

``ensure_compiler()`` runs the same sequence and additionally verifies the
result, so its return value always names an existing executable.
"""

from __future__ import annotations

import os
from collections.abc import Callable
from pathlib import Path
from typing import Protocol

import structlog
from pydantic import BaseModel, ConfigDict, Field

from zkbuild_core.config import (
    DEFAULT_COMPILERS_DIR,
    DEFAULT_DOWNLOAD_BASE_URL,
    DEFAULT_DOWNLOAD_TIMEOUT,
    DEFAULT_VERSION_PREFIXES,
    DEFAULT_ZKSOLC_VERSION,
    ZkBuildSettings,
)
from zkbuild_core.errors import SpawnError, WriteError
from zkbuild_core.manager.compilers_dir import compiler_filename, ensure_compilers_dir
from zkbuild_core.manager.downloader import BinaryDownloader
from zkbuild_core.manager.platform import CompilerPlatform
from zkbuild_core.manager.version import LocalPath, RemoteVersion, resolve_version_spec

logger = structlog.get_logger(__name__)


class CompilerDownloader(Protocol):
    """Anything able to place a zksolc release at a given path."""

    @property
    def platform(self) -> CompilerPlatform: ...

    def download(self, version: str, target_path: Path) -> Path: ...


class CompilerManagerOptions(BaseModel):
    """Options for building a CompilerManager.

    Attributes:
        version: Version spec string (x.y.z, solc:x.y.z, or a path).
        compilers_dir: Directory holding downloaded binaries.
        download_base_url: Base URL of the zksolc binary repository.
        version_prefixes: Prefixes accepted in front of a version.
        download_timeout: Network timeout in seconds.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    version: str = Field(default=DEFAULT_ZKSOLC_VERSION, description="Version spec string")
    compilers_dir: Path = Field(default=DEFAULT_COMPILERS_DIR, description="Compilers directory")
    download_base_url: str = Field(default=DEFAULT_DOWNLOAD_BASE_URL, min_length=1)
    version_prefixes: tuple[str, ...] = Field(default=DEFAULT_VERSION_PREFIXES)
    download_timeout: float = Field(default=DEFAULT_DOWNLOAD_TIMEOUT, gt=0)

    @classmethod
    def from_settings(cls, version: str, settings: ZkBuildSettings) -> CompilerManagerOptions:
        """Combine a version spec with environment-derived settings."""
        return cls(
            version=version,
            compilers_dir=settings.compilers_dir,
            download_base_url=settings.download_base_url,
            version_prefixes=settings.version_prefixes,
            download_timeout=settings.download_timeout,
        )


class CompilerManager:
    """Locate, download and hand out the zksolc binary for one build.

    The binary path is a pure function of the version spec, the compilers
    directory and the platform, so different versions never share a file.

    Attributes:
        spec: Resolved version spec.
        compilers_dir: Absolute compilers directory.
    """

    def __init__(
        self,
        spec: RemoteVersion | LocalPath,
        compilers_dir: Path,
        *,
        downloader: CompilerDownloader,
    ) -> None:
        """Initialize CompilerManager.

        Prefer CompilerManager.build(), which resolves the spec for you.

        Args:
            spec: Resolved version spec.
            compilers_dir: Directory holding downloaded binaries.
            downloader: Used to fetch remote versions.

        Raises:
            UnsupportedPlatformError: If spec is remote and the host has no
                zksolc build.
        """
        self.spec = spec
        self.compilers_dir = Path(compilers_dir).expanduser().absolute()
        self._downloader = downloader
        self._dir_ready = False

        if isinstance(spec, RemoteVersion):
            name = compiler_filename(spec.version, downloader.platform)
            self._compiler_path = self.compilers_dir / name
        else:
            self._compiler_path = spec.path.expanduser().absolute()

        self._log = logger.bind(spec=str(spec), compiler_path=str(self._compiler_path))

    @classmethod
    def build(
        cls,
        options: CompilerManagerOptions,
        *,
        downloader: CompilerDownloader | None = None,
    ) -> CompilerManager:
        """Resolve the version spec and compute paths. Never downloads.

        Args:
            options: Manager options.
            downloader: Downloader override (tests, custom mirrors).

        Returns:
            CompilerManager ready for check_setup_compilers_dir().

        Raises:
            InvalidVersionSpecError: If options.version cannot be classified.
            UnsupportedPlatformError: If a remote version was requested on
                a platform without zksolc builds.
        """
        spec = resolve_version_spec(options.version, options.version_prefixes)
        if downloader is None:
            downloader = BinaryDownloader(
                options.download_base_url,
                timeout=options.download_timeout,
            )
        return cls(spec, options.compilers_dir, downloader=downloader)

    def check_setup_compilers_dir(self) -> Path:
        """Create the compilers directory if needed.

        Returns:
            Absolute compilers directory.

        Raises:
            CacheDirUnavailableError: If the directory cannot be prepared.
        """
        self.compilers_dir = ensure_compilers_dir(self.compilers_dir)
        self._dir_ready = True
        return self.compilers_dir

    def exists(self) -> bool:
        """Check whether the compiler binary is present and executable."""
        path = self._compiler_path
        return path.is_file() and os.access(path, os.X_OK)

    def download(self) -> CompilerManager:
        """Download the compiler for a remote spec; no-op for a local path.

        Returns:
            self, for chaining.

        Raises:
            CacheDirUnavailableError: If the compilers directory is unusable.
            NetworkError: If the binary cannot be fetched.
            WriteError: If the binary cannot be saved.
        """
        if isinstance(self.spec, LocalPath):
            self._log.debug("compiler_download_skipped", reason="local_path")
            return self

        if not self._dir_ready:
            self.check_setup_compilers_dir()

        self._downloader.download(self.spec.version, self._compiler_path)
        return self

    def get_full_compiler_path(self) -> Path:
        """Return the compiler binary path.

        Only meaningful once exists() is true or download() has succeeded.
        """
        return self._compiler_path

    def ensure_compiler(
        self,
        on_download: Callable[[CompilerManager], None] | None = None,
    ) -> Path:
        """Make sure the compiler binary is available and return its path.

        Args:
            on_download: Called right before a download starts.

        Returns:
            Path to an existing, executable zksolc binary.

        Raises:
            CacheDirUnavailableError: If the compilers directory is unusable.
            NetworkError: If a download is needed and fails.
            WriteError: If a download is needed and cannot be saved.
            SpawnError: If a local compiler path is missing or not executable.
        """
        self.check_setup_compilers_dir()

        if self.exists():
            self._log.debug("compiler_cached")
            return self._compiler_path

        if isinstance(self.spec, LocalPath):
            raise SpawnError(
                f"no executable zksolc at {self._compiler_path}",
                binary_path=str(self._compiler_path),
            )

        if on_download is not None:
            on_download(self)
        self.download()

        if not self.exists():
            raise WriteError(f"downloaded compiler at {self._compiler_path} is not executable")
        return self._compiler_path
