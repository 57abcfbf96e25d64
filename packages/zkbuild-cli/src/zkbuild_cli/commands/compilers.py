"""zkbuild compilers command - Manage cached zksolc binaries."""

from __future__ import annotations

from pathlib import Path

import click

from zkbuild_cli.errors import handle_zkbuild_error
from zkbuild_cli.output import info, success, warning
from zkbuild_cli.settings import load_settings
from zkbuild_core.errors import ZkBuildError
from zkbuild_core.manager import CompilerManager, CompilerManagerOptions, list_cached_compilers

compilers_dir_option = click.option(
    "--compilers-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory for downloaded compilers [default: ~/.zksync]",
)


def _manager_for(version: str, compilers_dir: Path | None) -> CompilerManager:
    settings = load_settings(compilers_dir)
    try:
        return CompilerManager.build(CompilerManagerOptions.from_settings(version, settings))
    except ZkBuildError as e:
        handle_zkbuild_error(e)


@click.group()
def compilers() -> None:
    """Manage cached zksolc compilers.

    **Commands:**

    - `zkbuild compilers install VERSION` - Download a zksolc release
    - `zkbuild compilers list` - List cached compilers
    - `zkbuild compilers path VERSION` - Print where a compiler lives
    """
    pass


@compilers.command("install")
@click.argument("version")
@compilers_dir_option
def install(version: str, compilers_dir: Path | None) -> None:
    """Download a zksolc release into the compilers directory.

    Does nothing if the release is already cached.

    Examples:

        zkbuild compilers install 1.3.9

        zkbuild compilers install solc:1.3.13 --compilers-dir ./.zksync
    """
    manager = _manager_for(version, compilers_dir)

    try:
        path = manager.ensure_compiler(
            on_download=lambda _: info("Downloading zksolc compiler"),
        )
    except ZkBuildError as e:
        handle_zkbuild_error(e)

    success(f"zksolc {manager.spec} is available at {path}")


@compilers.command("list")
@compilers_dir_option
def list_compilers(compilers_dir: Path | None) -> None:
    """List zksolc binaries in the compilers directory."""
    settings = load_settings(compilers_dir)
    cached = list_cached_compilers(settings.compilers_dir)

    if not cached:
        info(f"No zksolc compilers in {settings.compilers_dir}")
        return

    for path in cached:
        info(path.name)


@compilers.command("path")
@click.argument("version")
@compilers_dir_option
def compiler_path(version: str, compilers_dir: Path | None) -> None:
    """Print the path a zksolc version is (or would be) stored at."""
    manager = _manager_for(version, compilers_dir)
    path = manager.get_full_compiler_path()

    click.echo(str(path))
    if not manager.exists():
        warning(f"zksolc {manager.spec} is not installed")
