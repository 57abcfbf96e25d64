"""Compilers directory management.

The compilers directory is shared by every build on the machine. It is
created on first use, never cleaned up automatically, and only ever gains
files (one binary per version and platform).
"""

from __future__ import annotations

import os
import stat
from pathlib import Path

import structlog

from zkbuild_core.errors import CacheDirUnavailableError
from zkbuild_core.manager.platform import CompilerPlatform

logger = structlog.get_logger(__name__)

# Owner must be able to list, create and execute files in the directory.
OWNER_RWX = stat.S_IRWXU


def ensure_compilers_dir(path: Path) -> Path:
    """Create the compilers directory if needed and make it usable.

    Safe to call repeatedly and from concurrent processes: a directory that
    already exists (including one created by a racing caller) is success.

    Args:
        path: Directory to prepare. "~" is expanded.

    Returns:
        Absolute path of the directory.

    Raises:
        CacheDirUnavailableError: If the path exists as something other than
            a directory, cannot be created, or is not readable, writable and
            searchable by the current user.
    """
    directory = Path(path).expanduser().absolute()

    try:
        directory.mkdir(parents=True, exist_ok=True)
    except FileExistsError:
        # mkdir(exist_ok=True) only raises this when the path is not a directory
        raise CacheDirUnavailableError(
            f"{directory} exists and is not a directory",
            path=str(directory),
        ) from None
    except OSError as e:
        raise CacheDirUnavailableError(
            f"cannot create {directory}: {e.strerror or e}",
            path=str(directory),
            internal_details=repr(e),
        ) from e

    mode = stat.S_IMODE(directory.stat().st_mode)
    if mode & OWNER_RWX != OWNER_RWX:
        try:
            directory.chmod(mode | OWNER_RWX)
        except OSError as e:
            raise CacheDirUnavailableError(
                f"cannot set permissions on {directory}: {e.strerror or e}",
                path=str(directory),
                internal_details=repr(e),
            ) from e

    if not os.access(directory, os.R_OK | os.W_OK | os.X_OK):
        raise CacheDirUnavailableError(
            f"{directory} is not writable by the current user",
            path=str(directory),
        )

    logger.debug("compilers_dir_ready", path=str(directory))
    return directory


def list_cached_compilers(path: Path) -> list[Path]:
    """List zksolc binaries in the compilers directory.

    Temporary download files are skipped.

    Args:
        path: Compilers directory. A missing directory yields an empty list.

    Returns:
        Sorted list of binary paths.
    """
    directory = Path(path).expanduser()
    if not directory.is_dir():
        return []
    return sorted(
        p
        for p in directory.iterdir()
        if p.is_file() and p.name.startswith("zksolc-") and not p.name.endswith(".part")
    )


def compiler_filename(version: str, platform: CompilerPlatform) -> str:
    """Return the cached file name of a zksolc version for a platform.

    Cached binaries keep their published names, so each version and
    platform pair maps to exactly one file.

    Example:
        >>> compiler_filename("1.3.9", CompilerPlatform(directory="macosx-arm64"))
        'zksolc-macosx-arm64-v1.3.9'
    """
    return platform.binary_name(version)
