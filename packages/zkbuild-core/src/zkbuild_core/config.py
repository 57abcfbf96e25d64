"""Runtime settings for zkbuild.

Settings are read from environment variables, with CLI options taking
precedence over them:

- ZKBUILD_COMPILERS_DIR: where downloaded zksolc binaries are cached
- ZKBUILD_ZKSOLC_DOWNLOAD_URL: base URL of the zksolc binary repository
- ZKBUILD_VERSION_PREFIXES: comma-separated prefixes accepted before a version
- ZKBUILD_DOWNLOAD_TIMEOUT: per-operation network timeout in seconds
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

ENV_PREFIX = "ZKBUILD_"
DOWNLOAD_URL_ENV_VAR = "ZKBUILD_ZKSOLC_DOWNLOAD_URL"

DEFAULT_COMPILERS_DIR = Path.home() / ".zksync"
DEFAULT_DOWNLOAD_BASE_URL = "https://github.com/matter-labs/zksolc-bin/raw/main"
DEFAULT_VERSION_PREFIXES: tuple[str, ...] = ("zksolc:", "solc:")
DEFAULT_DOWNLOAD_TIMEOUT = 60.0

# zksolc release used when the caller does not pin one
DEFAULT_ZKSOLC_VERSION = "1.3.9"


class ZkBuildSettings(BaseSettings):
    """Settings shared by every pipeline stage.

    Loaded from environment variables with the ZKBUILD_ prefix. Values
    passed to the constructor take precedence over the environment.

    Attributes:
        compilers_dir: Directory holding downloaded zksolc binaries.
        download_base_url: Base URL of the zksolc binary repository.
        version_prefixes: Prefixes stripped before semantic-version parsing.
        download_timeout: Network timeout in seconds for each read/connect.

    Example:
        >>> # From environment
        >>> settings = ZkBuildSettings()
        >>>
        >>> # Explicit
        >>> settings = ZkBuildSettings(compilers_dir=Path("/tmp/zksync"))
    """

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        env_ignore_empty=True,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )

    compilers_dir: Path = Field(
        default=DEFAULT_COMPILERS_DIR,
        description="Directory holding downloaded zksolc binaries",
    )
    download_base_url: str = Field(
        default=DEFAULT_DOWNLOAD_BASE_URL,
        min_length=1,
        validation_alias=DOWNLOAD_URL_ENV_VAR,
        description="Base URL of the zksolc binary repository",
    )
    version_prefixes: Annotated[tuple[str, ...], NoDecode] = Field(
        default=DEFAULT_VERSION_PREFIXES,
        description="Prefixes accepted in front of a semantic version",
    )
    download_timeout: float = Field(
        default=DEFAULT_DOWNLOAD_TIMEOUT,
        gt=0,
        description="Network timeout in seconds",
    )

    @field_validator("compilers_dir")
    @classmethod
    def _expand_user(cls, v: Path) -> Path:
        return v.expanduser()

    @field_validator("download_base_url")
    @classmethod
    def _strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/") or v

    @field_validator("version_prefixes", mode="before")
    @classmethod
    def _split_prefixes(cls, v: Any) -> Any:
        """Accept "zksolc:,solc:" as well as a sequence."""
        if isinstance(v, str):
            return tuple(p.strip() for p in v.split(",") if p.strip())
        return v

    @classmethod
    def from_env(cls) -> ZkBuildSettings:
        """Build settings from ZKBUILD_* environment variables.

        Raises:
            pydantic.ValidationError: If a variable holds an invalid value.
        """
        return cls()
