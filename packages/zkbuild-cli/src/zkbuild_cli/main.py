"""CLI entry point for zkbuild.

This module defines the main CLI group using LazyGroup pattern so that
`zkbuild --help` stays fast: subcommands, and the compiler pipeline
behind them, are only imported when invoked.
"""

from __future__ import annotations

import importlib
from typing import Any

import click
import rich_click as rclick

from zkbuild_cli import __version__
from zkbuild_cli.output import set_no_color

# Configure rich-click for better help formatting
rclick.rich_click.TEXT_MARKUP = "markdown"
rclick.rich_click.SHOW_ARGUMENTS = True
rclick.rich_click.GROUP_ARGUMENTS_OPTIONS = True


class LazyGroup(rclick.RichGroup):
    """Click group that loads commands lazily.

    Attributes:
        lazy_subcommands: Mapping of command names to module paths.
    """

    def __init__(
        self,
        *args: Any,
        lazy_subcommands: dict[str, str] | None = None,
        **kwargs: Any,
    ) -> None:
        """Initialize LazyGroup.

        Args:
            *args: Positional arguments for parent class.
            lazy_subcommands: Mapping of command name to module path.
                Format: {"build": "zkbuild_cli.commands.build.build"}
            **kwargs: Keyword arguments for parent class.
        """
        super().__init__(*args, **kwargs)
        self.lazy_subcommands: dict[str, str] = lazy_subcommands or {}

    def list_commands(self, ctx: click.Context) -> list[str]:
        """Return sorted names of registered and lazy commands."""
        commands = set(super().list_commands(ctx))
        commands.update(self.lazy_subcommands.keys())
        return sorted(commands)

    def get_command(self, ctx: click.Context, cmd_name: str) -> click.Command | None:
        """Get a command by name, loading lazily if needed.

        Args:
            ctx: Click context.
            cmd_name: Name of the command to get.

        Returns:
            Click Command instance, or None if not found.
        """
        cmd = super().get_command(ctx, cmd_name)  # type: ignore[arg-type]
        if cmd is not None:
            return cmd

        if cmd_name not in self.lazy_subcommands:
            return None

        module_path = self.lazy_subcommands[cmd_name]
        module_name, attr_name = module_path.rsplit(".", 1)
        mod = importlib.import_module(module_name)
        return getattr(mod, attr_name)  # type: ignore[no-any-return]


LAZY_COMMANDS = {
    "build": "zkbuild_cli.commands.build.build",
    "compilers": "zkbuild_cli.commands.compilers.compilers",
}


@click.command(cls=LazyGroup, lazy_subcommands=LAZY_COMMANDS)
@click.version_option(version=__version__, prog_name="zkbuild")
@click.option(
    "--no-color",
    is_flag=True,
    default=False,
    help="Disable colored output.",
    is_eager=True,
    expose_value=False,
    callback=lambda ctx, param, value: set_no_color(value) if value else None,
)
@click.option(
    "-v",
    "--verbose",
    is_flag=True,
    default=False,
    help="Show debug logs on stderr.",
)
def cli(verbose: bool) -> None:
    """zkbuild - Compile smart contracts for zkSync with zksolc.

    Downloads the requested zksolc release on first use and caches it
    in `~/.zksync` (override with `ZKBUILD_COMPILERS_DIR`).

    **Getting Started:**

    - `zkbuild build Greeter.sol` - Compile src/Greeter.sol
    - `zkbuild build Greeter.sol --use-zksolc 1.3.13` - Pick a zksolc release
    - `zkbuild compilers list` - Show cached compilers
    """
    from zkbuild_core.observability import configure_logging

    configure_logging(verbose=verbose)


if __name__ == "__main__":
    cli()
