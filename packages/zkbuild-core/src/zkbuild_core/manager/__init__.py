"""Compiler acquisition for zkbuild.

This module exports everything needed to obtain a runnable zksolc binary:
- resolve_version_spec: Classify a version string as remote or local
- RemoteVersion / LocalPath: The two VersionSpec variants
- ensure_compilers_dir: Prepare the shared compilers directory
- BinaryDownloader: Fetch a zksolc release for the current platform
- CompilerManager: Facade combining the above
"""

from __future__ import annotations

from zkbuild_core.manager.compilers_dir import (
    compiler_filename,
    ensure_compilers_dir,
    list_cached_compilers,
)
from zkbuild_core.manager.downloader import STALE_TEMP_SECONDS, BinaryDownloader
from zkbuild_core.manager.manager import (
    CompilerDownloader,
    CompilerManager,
    CompilerManagerOptions,
)
from zkbuild_core.manager.platform import (
    SUPPORTED_PLATFORMS,
    CompilerPlatform,
    detect_platform,
)
from zkbuild_core.manager.version import (
    LocalPath,
    RemoteVersion,
    VersionSpec,
    is_semver,
    resolve_version_spec,
)

__all__: list[str] = [
    # Version specs
    "VersionSpec",
    "RemoteVersion",
    "LocalPath",
    "resolve_version_spec",
    "is_semver",
    # Compilers directory
    "ensure_compilers_dir",
    "list_cached_compilers",
    "compiler_filename",
    # Downloads
    "BinaryDownloader",
    "CompilerPlatform",
    "SUPPORTED_PLATFORMS",
    "STALE_TEMP_SECONDS",
    "detect_platform",
    # Facade
    "CompilerManager",
    "CompilerManagerOptions",
    "CompilerDownloader",
]
