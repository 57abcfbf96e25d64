"""CLI error handling for zkbuild-cli.

This module provides CLI-specific error handling that wraps
zkbuild-core exceptions and failure kinds into user-friendly
messages with appropriate exit codes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, NoReturn

import click
from pydantic import ValidationError as PydanticValidationError

from zkbuild_cli.output import error
from zkbuild_core.errors import DiagnosticKind, ZkBuildError

if TYPE_CHECKING:
    from pydantic_core import ErrorDetails


# Exit codes following sysexits.h convention
EXIT_SUCCESS = 0
EXIT_USER_ERROR = 1  # User error (bad version, missing contract, compile errors)
EXIT_SYSTEM_ERROR = 2  # System error (network, permissions, compiler crash)

# Failures the user fixes by changing their input
USER_ERROR_KINDS: frozenset[DiagnosticKind] = frozenset(
    {
        DiagnosticKind.INVALID_VERSION_SPEC,
        DiagnosticKind.CONTRACT_NOT_FOUND,
        DiagnosticKind.COMPILER_REPORTED_ERROR,
    }
)


class CLIError(click.ClickException):
    """CLI-specific exception with exit code support.

    Attributes:
        message: User-facing error message.
        exit_code: Exit code for the CLI (default: 1).
    """

    def __init__(self, message: str, exit_code: int = EXIT_USER_ERROR) -> None:
        """Initialize CLIError.

        Args:
            message: User-facing error message.
            exit_code: Exit code for the CLI.
        """
        super().__init__(message)
        self.exit_code = exit_code

    def show(self, file: object = None) -> None:
        """Display the error message using Rich formatting.

        Args:
            file: Output file (unused, for Click compatibility).
        """
        error(self.format_message())


def exit_code_for(kind: DiagnosticKind) -> int:
    """Return the CLI exit code for a failure kind."""
    return EXIT_USER_ERROR if kind in USER_ERROR_KINDS else EXIT_SYSTEM_ERROR


def handle_zkbuild_error(err: ZkBuildError) -> NoReturn:
    """Convert a zkbuild-core exception into a CLIError.

    Raises:
        CLIError: Always, with the headline-prefixed message.
    """
    raise CLIError(err.describe(), exit_code=exit_code_for(err.kind)) from err


def format_pydantic_error(err: PydanticValidationError) -> str:
    """Format Pydantic validation error into user-friendly message.

    Example:
        >>> format_pydantic_error(err)
        "Validation failed:\\n  - optimizer.mode: Input should be '0', '1', ..."
    """
    errors: list[ErrorDetails] = err.errors()
    lines = ["Validation failed:"]

    for e in errors:
        loc = ".".join(str(x) for x in e["loc"])
        msg = e["msg"]
        lines.append(f"  - {loc}: {msg}")

    return "\n".join(lines)


def handle_yaml_error(err: Exception, file_path: str) -> NoReturn:
    """Handle YAML parsing errors with line number information.

    Raises:
        CLIError: Always raises with formatted error message.
    """
    # yaml.YAMLError has mark attribute with line info
    error_msg = str(err)
    mark = getattr(err, "problem_mark", None)
    if mark is not None:
        line = mark.line + 1
        col = mark.column + 1
        problem = getattr(err, "problem", None) or err
        error_msg = f"YAML syntax error at line {line}, column {col}: {problem}"

    raise CLIError(f"Invalid YAML in {file_path}: {error_msg}")


def handle_validation_error(err: PydanticValidationError, source: str) -> NoReturn:
    """Handle Pydantic validation errors with user-friendly messages.

    Args:
        err: Pydantic ValidationError instance.
        source: File or environment the invalid values came from.

    Raises:
        CLIError: Always raises with formatted error message.
    """
    formatted = format_pydantic_error(err)
    raise CLIError(f"Invalid configuration in {source}:\n{formatted}")


def handle_file_not_found(file_path: str) -> NoReturn:
    """Handle a missing configuration file.

    Raises:
        CLIError: Always raises with formatted error message.
    """
    raise CLIError(
        f"File not found: {file_path}\n\n"
        "Use --config to point at a zkbuild.yaml, or --root to pick the project directory.",
        exit_code=EXIT_SYSTEM_ERROR,
    )


def handle_permission_error(path: str, operation: str = "access") -> NoReturn:
    """Handle permission errors.

    Raises:
        CLIError: Always raises with formatted error message.
    """
    raise CLIError(
        f"Permission denied: Cannot {operation} {path}",
        exit_code=EXIT_SYSTEM_ERROR,
    )
