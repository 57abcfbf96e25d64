"""Project model for zkbuild.

The project model is the small slice of workspace configuration the zksolc
pipeline needs: where sources and libraries live, import remappings, and
compiler settings. It is read from an optional ``zkbuild.yaml`` at the
project root::

    src: contracts
    libs: [lib]
    remappings:
      - "@openzeppelin/=lib/openzeppelin-contracts/"
    solc: /usr/local/bin/solc-0.8.19
    optimizer:
      enabled: true
      mode: "3"
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated, Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)

PROJECT_FILE_NAME = "zkbuild.yaml"

# context:prefix=target, context optional
REMAPPING_PATTERN = r"^(?:[^:=]+:)?[^=]+=.*$"

OptimizerMode = Literal["0", "1", "2", "3", "s", "z"]


class OptimizerSettings(BaseModel):
    """zksolc LLVM optimizer settings.

    Attributes:
        enabled: Whether the optimizer runs.
        mode: LLVM optimization level ("0"-"3", "s" for size, "z" for min size).
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    enabled: bool = Field(default=True, description="Enable the optimizer")
    mode: OptimizerMode = Field(default="3", description="LLVM optimization mode")

    @field_validator("mode", mode="before")
    @classmethod
    def _coerce_mode(cls, value: Any) -> Any:
        # YAML reads `mode: 3` as an int
        return str(value) if isinstance(value, int) else value


class ProjectConfig(BaseModel):
    """Resolved project layout and compiler settings.

    Attributes:
        root: Project root directory.
        src: Source directory, relative to root unless absolute.
        libs: Library directories, relative to root unless absolute.
        remappings: Solidity import remappings ("prefix=target").
        solc: Path to the solc binary zksolc should drive, if any.
        optimizer: Optimizer settings.
        force_evmla: Compile through the EVM legacy assembly pipeline.
        libraries: Deployed library addresses, keyed by source then name.

    Example:
        >>> project = ProjectConfig(root=Path("."))
        >>> project.source_root
        PosixPath('src')
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    root: Path = Field(default=Path("."), description="Project root directory")
    src: Path = Field(default=Path("src"), description="Source directory")
    libs: list[Path] = Field(default_factory=lambda: [Path("lib")], description="Library dirs")
    remappings: list[Annotated[str, Field(pattern=REMAPPING_PATTERN)]] = Field(
        default_factory=list,
        description="Import remappings",
    )
    solc: Path | None = Field(default=None, description="solc binary driven by zksolc")
    optimizer: OptimizerSettings = Field(
        default_factory=OptimizerSettings,
        description="Optimizer settings",
    )
    force_evmla: bool = Field(default=False, description="Force the EVM legacy assembly pipeline")
    libraries: dict[str, dict[str, str]] = Field(
        default_factory=dict,
        description="Deployed library addresses",
    )

    @property
    def source_root(self) -> Path:
        return self.root / self.src

    @property
    def library_roots(self) -> list[Path]:
        return [self.root / lib for lib in self.libs]

    @classmethod
    def from_yaml(cls, path: str | Path) -> ProjectConfig:
        """Load and validate ProjectConfig from a YAML file.

        A relative ``root`` (or no root at all) is taken relative to the
        directory holding the file.

        Args:
            path: Path to zkbuild.yaml.

        Returns:
            Validated ProjectConfig instance.

        Raises:
            FileNotFoundError: If file doesn't exist.
            yaml.YAMLError: If YAML syntax is invalid.
            pydantic.ValidationError: If schema validation fails.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")

        with path.open("r") as f:
            data: dict[str, Any] = yaml.safe_load(f) or {}

        root = Path(data.get("root", "."))
        if not root.is_absolute():
            root = path.parent / root
        data["root"] = root

        logger.debug("Loaded project configuration from %s", path)
        return cls.model_validate(data)

    @classmethod
    def discover(cls, root: str | Path) -> ProjectConfig:
        """Load root/zkbuild.yaml if present, otherwise use defaults.

        Args:
            root: Project root directory.

        Returns:
            ProjectConfig for the project.
        """
        root = Path(root)
        project_file = root / PROJECT_FILE_NAME
        if project_file.is_file():
            return cls.from_yaml(project_file)
        logger.debug("No %s in %s, using default layout", PROJECT_FILE_NAME, root)
        return cls(root=root)
