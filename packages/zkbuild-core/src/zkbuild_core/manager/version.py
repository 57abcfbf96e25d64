"""Version spec resolution for zksolc.

A version spec is what the user passes to ``--use-zksolc``. It is either a
semantic version to fetch from the zksolc binary repository or a path to a
compiler that already exists on disk:

- ``1.3.9`` / ``v1.3.9``          -> RemoteVersion("1.3.9")
- ``zksolc:1.3.9`` / ``solc:1.3.9`` -> RemoteVersion("1.3.9")
- ``/opt/zksolc`` / ``bin/zksolc.exe`` -> LocalPath(...)
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from pathlib import Path
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from zkbuild_core.config import DEFAULT_VERSION_PREFIXES
from zkbuild_core.errors import InvalidVersionSpecError

SEMVER_PATTERN = re.compile(
    r"^(?P<major>0|[1-9]\d*)\.(?P<minor>0|[1-9]\d*)\.(?P<patch>0|[1-9]\d*)"
    r"(?:-(?P<prerelease>[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?"
    r"(?:\+(?P<build>[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?$"
)


class RemoteVersion(BaseModel):
    """A zksolc release identified by its semantic version.

    Attributes:
        kind: Discriminator, always "remote".
        version: Normalised version without prefix or leading "v".
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal["remote"] = "remote"
    version: str = Field(..., pattern=SEMVER_PATTERN.pattern, description="Semantic version")

    def __str__(self) -> str:
        return self.version


class LocalPath(BaseModel):
    """A zksolc binary already present on the local filesystem.

    Attributes:
        kind: Discriminator, always "local".
        path: Path as given by the user.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal["local"] = "local"
    path: Path = Field(..., description="Path to an existing zksolc executable")

    def __str__(self) -> str:
        return str(self.path)


VersionSpec = Annotated[Union[RemoteVersion, LocalPath], Field(discriminator="kind")]


def is_semver(value: str) -> bool:
    """Check whether a string is a semantic version (x.y.z[-pre][+build])."""
    return SEMVER_PATTERN.match(value) is not None


def _strip_v(value: str) -> str:
    if len(value) > 1 and value[0] in "vV" and value[1].isdigit():
        return value[1:]
    return value


def resolve_version_spec(
    raw: str,
    prefixes: Iterable[str] = DEFAULT_VERSION_PREFIXES,
) -> RemoteVersion | LocalPath:
    """Classify a user-supplied version string.

    Semantic versions win over paths: a string is only treated as a path
    when it does not parse as a version. Existence of a local path is not
    checked here; CompilerManager reports a missing binary later.

    Args:
        raw: Version string from the CLI or configuration.
        prefixes: Accepted prefixes in front of a version (e.g. "solc:").

    Returns:
        RemoteVersion or LocalPath.

    Raises:
        InvalidVersionSpecError: If the string is empty, contains a NUL
            byte, or has a recognised prefix but no valid version after it.

    Example:
        >>> resolve_version_spec("solc:1.3.9")
        RemoteVersion(kind='remote', version='1.3.9')
        >>> resolve_version_spec("/usr/local/bin/zksolc")
        LocalPath(kind='local', path=PosixPath('/usr/local/bin/zksolc'))
    """
    value = raw.strip()
    if not value:
        raise InvalidVersionSpecError("version string is empty")
    if "\x00" in value:
        raise InvalidVersionSpecError(
            "version string contains a NUL byte",
            internal_details=f"raw={raw!r}",
        )

    for prefix in prefixes:
        if prefix and value.startswith(prefix):
            candidate = _strip_v(value[len(prefix) :])
            if not is_semver(candidate):
                raise InvalidVersionSpecError(
                    f"'{raw}' does not name a semantic version after '{prefix}'"
                )
            return RemoteVersion(version=candidate)

    candidate = _strip_v(value)
    if is_semver(candidate):
        return RemoteVersion(version=candidate)

    return LocalPath(path=Path(value))
