"""Settings and project loading shared by zkbuild commands."""

from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import ValidationError as PydanticValidationError

from zkbuild_cli.errors import (
    handle_file_not_found,
    handle_validation_error,
    handle_yaml_error,
)
from zkbuild_core.config import ZkBuildSettings
from zkbuild_core.project import ProjectConfig


def load_settings(compilers_dir: Path | None = None) -> ZkBuildSettings:
    """Read settings from the environment, applying CLI overrides.

    Args:
        compilers_dir: --compilers-dir value, if given.

    Raises:
        CLIError: If an environment variable holds an invalid value.
    """
    try:
        settings = ZkBuildSettings.from_env()
    except PydanticValidationError as e:
        handle_validation_error(e, "ZKBUILD_* environment variables")

    if compilers_dir is not None:
        settings = settings.model_copy(update={"compilers_dir": compilers_dir.expanduser()})
    return settings


def load_project(root: Path, config_path: Path | None = None) -> ProjectConfig:
    """Load the project model from --config, or discover it under root.

    Raises:
        CLIError: If the file is missing, is not valid YAML, or fails validation.
    """
    source = str(config_path or root / "zkbuild.yaml")
    try:
        if config_path is not None:
            return ProjectConfig.from_yaml(config_path)
        return ProjectConfig.discover(root)
    except FileNotFoundError:
        handle_file_not_found(source)
    except yaml.YAMLError as e:
        handle_yaml_error(e, source)
    except PydanticValidationError as e:
        handle_validation_error(e, source)
