"""zkbuild build command - Compile a contract with zksolc."""

from __future__ import annotations

import json
from pathlib import Path
from typing import TYPE_CHECKING

import click

from zkbuild_cli.errors import (
    EXIT_SYSTEM_ERROR,
    CLIError,
    exit_code_for,
    handle_permission_error,
)
from zkbuild_cli.output import info, print_diagnostics, success
from zkbuild_cli.settings import load_project, load_settings
from zkbuild_core.config import DEFAULT_ZKSOLC_VERSION
from zkbuild_core.pipeline import BuildStage, compile_contract

if TYPE_CHECKING:
    from zkbuild_core.compilation.models import CompilationOutcome

ARTIFACTS_FILE_NAME = "artifacts.json"

STAGE_MESSAGES: dict[BuildStage, str] = {
    BuildStage.DOWNLOADING: "Downloading zksolc compiler",
    BuildStage.COMPILING: "Compiling smart contracts...",
}


def _report_stage(stage: BuildStage) -> None:
    message = STAGE_MESSAGES.get(stage)
    if message is not None:
        info(message)


def write_artifacts(
    outcome: CompilationOutcome,
    contract_filename: str,
    output_dir: Path,
    *,
    version: str,
    is_system_mode: bool,
) -> Path:
    """Write the artifacts of a successful build to <output>/<Contract.sol>/.

    Args:
        outcome: Successful compilation outcome.
        contract_filename: Contract file name as given on the command line.
        output_dir: Root output directory.
        version: zksolc version spec used for the build.
        is_system_mode: Whether the contract was compiled in system mode.

    Returns:
        Path of the written artifacts file.

    Raises:
        OSError: If the directory or file cannot be written.
    """
    contract_dir = output_dir / Path(contract_filename).name
    contract_dir.mkdir(parents=True, exist_ok=True)

    document = {
        "contract": contract_filename,
        "zksolc": version,
        "compiler_version": outcome.compiler_version,
        "is_system": is_system_mode,
        "contracts": {
            artifact.name: artifact.model_dump(mode="json", exclude={"name"})
            for artifact in outcome.artifacts
        },
    }
    artifacts_path = contract_dir / ARTIFACTS_FILE_NAME
    artifacts_path.write_text(json.dumps(document, indent=2))
    return artifacts_path


@click.command("build")
@click.argument("contract_filename")
@click.option(
    "--use-zksolc",
    "version",
    type=str,
    default=DEFAULT_ZKSOLC_VERSION,
    show_default=True,
    help="zksolc version (x.y.z, zksolc:x.y.z, solc:x.y.z) or path to a zksolc binary",
)
@click.option(
    "--is-system",
    is_flag=True,
    default=False,
    help="Compile in zkSync system mode",
)
@click.option(
    "--root",
    "root",
    type=click.Path(file_okay=False, path_type=Path),
    default=".",
    help="Project root [default: .]",
)
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Path to zkbuild.yaml [default: <root>/zkbuild.yaml if present]",
)
@click.option(
    "-o",
    "--output",
    "output_path",
    type=click.Path(file_okay=False, path_type=Path),
    default="zkout",
    help="Output directory [default: zkout]",
)
@click.option(
    "--compilers-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory for downloaded compilers [default: ~/.zksync]",
)
@click.option(
    "--solc",
    "solc_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="solc binary for zksolc to use",
)
def build(
    contract_filename: str,
    version: str,
    is_system: bool,
    root: Path,
    config_path: Path | None,
    output_path: Path,
    compilers_dir: Path | None,
    solc_path: Path | None,
) -> None:
    """Compile a contract for zkSync with zksolc.

    CONTRACT_FILENAME is looked up under the project's source directory
    (`src` unless zkbuild.yaml says otherwise).

    Examples:

        zkbuild build Greeter.sol

        zkbuild build Greeter.sol --use-zksolc 1.3.13 --is-system

        zkbuild build Greeter.sol --use-zksolc ./bin/zksolc
    """
    settings = load_settings(compilers_dir)
    project = load_project(root, config_path)
    if solc_path is not None:
        project = project.model_copy(update={"solc": solc_path.absolute()})

    outcome = compile_contract(
        contract_filename,
        project,
        version=version,
        is_system_mode=is_system,
        settings=settings,
        progress=_report_stage,
    )

    print_diagnostics(outcome.warnings)

    if outcome.kind is not None:
        raise CLIError(outcome.describe(), exit_code=exit_code_for(outcome.kind))

    try:
        artifacts_path = write_artifacts(
            outcome,
            contract_filename,
            output_path,
            version=version,
            is_system_mode=is_system,
        )
    except PermissionError:
        handle_permission_error(str(output_path), "write to")
    except OSError as e:
        raise CLIError(
            f"Cannot write to: {output_path} ({e.strerror or e})",
            exit_code=EXIT_SYSTEM_ERROR,
        ) from e

    success("Compiled Successfully")
    info(f"Artifacts written to {artifacts_path}")
