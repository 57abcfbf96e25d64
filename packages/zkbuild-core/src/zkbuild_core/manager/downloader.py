"""zksolc binary downloader.

Binaries are streamed into a temporary ``.part`` file next to the target and
moved into place with ``os.replace``. Readers therefore see either no file or
a complete executable, and two processes downloading the same version at
once simply replace one complete file with an identical one.
"""

from __future__ import annotations

import os
import tempfile
import time
from pathlib import Path
from typing import BinaryIO

import httpx
import structlog

from zkbuild_core.config import DEFAULT_DOWNLOAD_BASE_URL, DEFAULT_DOWNLOAD_TIMEOUT
from zkbuild_core.errors import NetworkError, WriteError
from zkbuild_core.manager.platform import CompilerPlatform, detect_platform

logger = structlog.get_logger(__name__)

# Temp files older than this are leftovers of an interrupted download.
STALE_TEMP_SECONDS = 60 * 60

EXECUTABLE_MODE = 0o755

TEMP_SUFFIX = ".part"


def temp_prefix(target_path: Path) -> str:
    """Return the temp file name prefix used while downloading target_path."""
    return f".{target_path.name}."


class BinaryDownloader:
    """Fetch zksolc binaries for the current platform.

    Attributes:
        base_url: Base URL of the zksolc binary repository.
        timeout: Network timeout in seconds.

    Example:
        >>> downloader = BinaryDownloader()
        >>> downloader.download("1.3.9", Path("~/.zksync/zksolc-linux-amd64-musl-v1.3.9"))
    """

    def __init__(
        self,
        base_url: str = DEFAULT_DOWNLOAD_BASE_URL,
        *,
        platform: CompilerPlatform | None = None,
        client: httpx.Client | None = None,
        timeout: float = DEFAULT_DOWNLOAD_TIMEOUT,
    ) -> None:
        """Initialize BinaryDownloader.

        Args:
            base_url: Base URL of the zksolc binary repository.
            platform: Download coordinates. Detected from the host if None.
            client: HTTP client to use. A short-lived client is created per
                download if None.
            timeout: Network timeout in seconds for the default client.
        """
        self.base_url = base_url
        self.timeout = timeout
        self._platform = platform
        self._client = client

    @property
    def platform(self) -> CompilerPlatform:
        """Download coordinates, detected on first access.

        Raises:
            UnsupportedPlatformError: If the host has no zksolc build.
        """
        if self._platform is None:
            self._platform = detect_platform()
        return self._platform

    def url_for(self, version: str) -> str:
        """Return the download URL of a zksolc version for this platform."""
        return self.platform.download_url(self.base_url, version)

    def download(self, version: str, target_path: Path) -> Path:
        """Download a zksolc version to target_path and mark it executable.

        Args:
            version: Semantic version to fetch (e.g. "1.3.9").
            target_path: Final location of the binary. Its directory must exist.

        Returns:
            target_path.

        Raises:
            NetworkError: If the request fails or returns an error status.
            WriteError: If the binary cannot be written or moved into place.
            UnsupportedPlatformError: If the host has no zksolc build.
        """
        target = Path(target_path)
        url = self.url_for(version)
        log = logger.bind(version=version, url=url, target=str(target))

        self._remove_stale_temp_files(target)

        try:
            fd, tmp_name = tempfile.mkstemp(
                prefix=temp_prefix(target),
                suffix=TEMP_SUFFIX,
                dir=target.parent,
            )
        except OSError as e:
            raise WriteError(
                f"cannot create a temporary file in {target.parent}: {e.strerror or e}",
                internal_details=repr(e),
            ) from e

        tmp_path = Path(tmp_name)
        log.info("compiler_download_started", temp_file=tmp_path.name)

        try:
            with os.fdopen(fd, "wb") as fh:
                size = self._fetch(url, fh)
                fh.flush()
                os.fsync(fh.fileno())
            tmp_path.chmod(EXECUTABLE_MODE)
            os.replace(tmp_path, target)
        except OSError as e:
            tmp_path.unlink(missing_ok=True)
            raise WriteError(
                f"cannot write {target}: {e.strerror or e}",
                internal_details=repr(e),
            ) from e
        except BaseException:
            tmp_path.unlink(missing_ok=True)
            raise

        log.info("compiler_download_completed", size_bytes=size)
        return target

    def _fetch(self, url: str, fh: BinaryIO) -> int:
        """Stream url into fh, returning the number of bytes written."""
        client = self._client or httpx.Client(timeout=self.timeout)
        written = 0
        try:
            with client.stream("GET", url, follow_redirects=True) as response:
                if response.status_code >= 400:
                    raise NetworkError(
                        f"GET {url} returned HTTP {response.status_code}",
                        url=url,
                        status_code=response.status_code,
                    )
                for chunk in response.iter_bytes():
                    fh.write(chunk)
                    written += len(chunk)
        except (httpx.HTTPError, httpx.InvalidURL, httpx.StreamError) as e:
            raise NetworkError(
                f"GET {url} failed: {e}",
                url=url,
                internal_details=repr(e),
            ) from e
        finally:
            if self._client is None:
                client.close()

        if written == 0:
            raise NetworkError(f"GET {url} returned an empty body", url=url)
        return written

    def _remove_stale_temp_files(self, target: Path) -> None:
        """Delete temp files left behind by interrupted downloads of target.

        Recent temp files may belong to a download still in progress in
        another process and are left alone.
        """
        cutoff = time.time() - STALE_TEMP_SECONDS
        for leftover in target.parent.glob(f"{temp_prefix(target)}*{TEMP_SUFFIX}"):
            try:
                if leftover.stat().st_mtime < cutoff:
                    leftover.unlink()
                    logger.debug("stale_temp_file_removed", path=str(leftover))
            except FileNotFoundError:
                continue
            except OSError as e:
                logger.warning("stale_temp_file_not_removed", path=str(leftover), error=str(e))
