"""Platform detection for zksolc downloads.

zksolc is published as one executable per (OS, architecture) pair under
``{base_url}/{directory}/zksolc-{directory}{suffix}-v{version}{extension}``.
"""

from __future__ import annotations

import platform as _platform

from pydantic import BaseModel, ConfigDict, Field

from zkbuild_core.errors import UnsupportedPlatformError


class CompilerPlatform(BaseModel):
    """Download coordinates of zksolc for one OS/architecture pair.

    Attributes:
        directory: Repository directory, e.g. "linux-amd64".
        suffix: Filename suffix after the directory, e.g. "-musl".
        extension: Executable extension, ".exe" on Windows.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    directory: str = Field(..., min_length=1, description="Repository directory")
    suffix: str = Field(default="", description="Filename suffix")
    extension: str = Field(default="", description="Executable extension")

    def binary_name(self, version: str) -> str:
        """Return the published file name for a version.

        Example:
            >>> CompilerPlatform(directory="linux-amd64", suffix="-musl").binary_name("1.3.9")
            'zksolc-linux-amd64-musl-v1.3.9'
        """
        return f"zksolc-{self.directory}{self.suffix}-v{version}{self.extension}"

    def download_url(self, base_url: str, version: str) -> str:
        return f"{base_url.rstrip('/')}/{self.directory}/{self.binary_name(version)}"


# (platform.system(), normalised machine) -> download coordinates
SUPPORTED_PLATFORMS: dict[tuple[str, str], CompilerPlatform] = {
    ("Linux", "x86_64"): CompilerPlatform(directory="linux-amd64", suffix="-musl"),
    ("Linux", "aarch64"): CompilerPlatform(directory="linux-arm64", suffix="-musl"),
    ("Darwin", "x86_64"): CompilerPlatform(directory="macosx-amd64"),
    ("Darwin", "aarch64"): CompilerPlatform(directory="macosx-arm64"),
    ("Windows", "x86_64"): CompilerPlatform(
        directory="windows-amd64",
        suffix="-gnu",
        extension=".exe",
    ),
}

_MACHINE_ALIASES = {
    "amd64": "x86_64",
    "x64": "x86_64",
    "arm64": "aarch64",
}


def detect_platform(system: str | None = None, machine: str | None = None) -> CompilerPlatform:
    """Return the zksolc download coordinates for an OS/architecture.

    Args:
        system: OS name as reported by platform.system(). Detected if None.
        machine: Architecture as reported by platform.machine(). Detected if None.

    Returns:
        CompilerPlatform for the pair.

    Raises:
        UnsupportedPlatformError: If no zksolc build exists for the pair.
    """
    system = system or _platform.system()
    machine = machine or _platform.machine()
    normalised = _MACHINE_ALIASES.get(machine.lower(), machine.lower())

    try:
        return SUPPORTED_PLATFORMS[(system, normalised)]
    except KeyError:
        raise UnsupportedPlatformError(system, machine) from None
