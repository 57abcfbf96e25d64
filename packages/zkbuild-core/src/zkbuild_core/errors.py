"""Custom exception hierarchy for zkbuild-core.

This module defines the exception classes raised by each stage of the
compiler acquisition and invocation pipeline:
- ZkBuildError: Base exception for all zkbuild errors
- DownloadError: Base for failures while acquiring a compiler binary
- InvokeError: Base for failures while running the compiler process

Every exception carries a DiagnosticKind so callers can map a failure to a
distinct, actionable message and exit code without isinstance ladders.

- User-facing messages are safe to display (no stack traces)
- Technical details logged internally via structlog
"""

from __future__ import annotations

from enum import Enum

import structlog

logger = structlog.get_logger(__name__)


class DiagnosticKind(str, Enum):
    """Kind of terminal failure produced by the pipeline.

    Attributes:
        INVALID_VERSION_SPEC: Version string could not be classified.
        CACHE_DIR_UNAVAILABLE: Compilers directory cannot be created or used.
        NETWORK_ERROR: Compiler binary could not be fetched.
        UNSUPPORTED_PLATFORM: No known binary for this OS/architecture.
        WRITE_ERROR: Downloaded binary could not be written to disk.
        CONTRACT_NOT_FOUND: Contract file missing from the source tree.
        SPAWN_ERROR: Compiler process could not be started.
        SERIALIZATION_ERROR: Compilation request could not be serialized.
        NON_ZERO_EXIT: Compiler ran and exited with a failure status.
        COMPILER_REPORTED_ERROR: Compiler output lists error diagnostics.
        MALFORMED_OUTPUT: Compiler output could not be understood.
    """

    INVALID_VERSION_SPEC = "invalid_version_spec"
    CACHE_DIR_UNAVAILABLE = "cache_dir_unavailable"
    NETWORK_ERROR = "network_error"
    UNSUPPORTED_PLATFORM = "unsupported_platform"
    WRITE_ERROR = "write_error"
    CONTRACT_NOT_FOUND = "contract_not_found"
    SPAWN_ERROR = "spawn_error"
    SERIALIZATION_ERROR = "serialization_error"
    NON_ZERO_EXIT = "non_zero_exit"
    COMPILER_REPORTED_ERROR = "compiler_reported_error"
    MALFORMED_OUTPUT = "malformed_output"


# Headline shown in front of the detail message for each failure kind.
FAILURE_HEADLINES: dict[DiagnosticKind, str] = {
    DiagnosticKind.INVALID_VERSION_SPEC: "Invalid zksolc version",
    DiagnosticKind.CACHE_DIR_UNAVAILABLE: "Failed to setup compilers directory",
    DiagnosticKind.NETWORK_ERROR: "Failed to download the zksolc compiler",
    DiagnosticKind.UNSUPPORTED_PLATFORM: "zksolc is not available for this platform",
    DiagnosticKind.WRITE_ERROR: "Failed to save the zksolc compiler",
    DiagnosticKind.CONTRACT_NOT_FOUND: "Contract not found",
    DiagnosticKind.SPAWN_ERROR: "Failed to start the zksolc compiler",
    DiagnosticKind.SERIALIZATION_ERROR: "Failed to parse json input for zksolc compiler",
    DiagnosticKind.NON_ZERO_EXIT: "zksolc exited with an error",
    DiagnosticKind.COMPILER_REPORTED_ERROR: "Failed to compile smart contracts with zksolc",
    DiagnosticKind.MALFORMED_OUTPUT: "Could not understand zksolc output",
}


def describe_failure(kind: DiagnosticKind, message: str) -> str:
    """Combine the headline for a failure kind with its detail message.

    Args:
        kind: Failure kind.
        message: Detail message (may be empty).

    Returns:
        User-facing text, e.g. "Contract not found: src/Missing.sol".
    """
    headline = FAILURE_HEADLINES[kind]
    return f"{headline}: {message}" if message else headline


class ZkBuildError(Exception):
    """Base exception for zkbuild.

    All zkbuild exceptions inherit from this class. User-facing messages
    are safe to display; technical details are logged internally.

    Args:
        user_message: Safe message to display to the user.
        internal_details: Optional technical details for logging. This is
            logged internally but NEVER exposed to the user.

    Example:
        >>> raise ZkBuildError(
        ...     "Compiler unavailable",
        ...     internal_details="stat(/root/.zksync/zksolc) -> EACCES"
        ... )
    """

    kind: DiagnosticKind = DiagnosticKind.SPAWN_ERROR

    def __init__(
        self,
        user_message: str,
        *,
        internal_details: str | None = None,
    ) -> None:
        """Initialize ZkBuildError with user message and optional internal details.

        Args:
            user_message: Safe message to display to the user.
            internal_details: Technical details for internal logging only.
        """
        super().__init__(user_message)
        self.user_message = user_message

        if internal_details:
            logger.error(
                "zkbuild_error",
                error_type=self.__class__.__name__,
                kind=self.kind.value,
                user_message=user_message,
                internal_details=internal_details,
            )

    def describe(self) -> str:
        """Return the headline-prefixed message for this error."""
        return describe_failure(self.kind, self.user_message)


class InvalidVersionSpecError(ZkBuildError):
    """Raised when a version string is neither a semantic version nor a path.

    Example:
        >>> raise InvalidVersionSpecError("'solc:latest' is not a semantic version")
    """

    kind = DiagnosticKind.INVALID_VERSION_SPEC


class CacheDirUnavailableError(ZkBuildError):
    """Raised when the compilers directory cannot be created or used.

    Attributes:
        path: Directory that could not be prepared.
    """

    kind = DiagnosticKind.CACHE_DIR_UNAVAILABLE

    def __init__(
        self,
        user_message: str,
        *,
        path: str | None = None,
        internal_details: str | None = None,
    ) -> None:
        super().__init__(user_message, internal_details=internal_details)
        self.path = path


class DownloadError(ZkBuildError):
    """Base class for failures while acquiring a compiler binary."""

    kind = DiagnosticKind.NETWORK_ERROR


class NetworkError(DownloadError):
    """Raised when fetching the compiler binary fails.

    Never retried internally; the caller decides whether to try again.

    Attributes:
        url: URL that was being fetched.
        status_code: HTTP status code, if a response was received.
    """

    kind = DiagnosticKind.NETWORK_ERROR

    def __init__(
        self,
        user_message: str,
        *,
        url: str,
        status_code: int | None = None,
        internal_details: str | None = None,
    ) -> None:
        super().__init__(user_message, internal_details=internal_details)
        self.url = url
        self.status_code = status_code


class WriteError(DownloadError):
    """Raised when a downloaded binary cannot be written into place."""

    kind = DiagnosticKind.WRITE_ERROR


class UnsupportedPlatformError(DownloadError):
    """Raised when no zksolc build exists for the current OS/architecture.

    Attributes:
        system: Operating system name (e.g. "Linux").
        machine: Machine architecture (e.g. "riscv64").
    """

    kind = DiagnosticKind.UNSUPPORTED_PLATFORM

    def __init__(self, system: str, machine: str) -> None:
        super().__init__(f"No zksolc build is published for {system}/{machine}")
        self.system = system
        self.machine = machine


class ContractNotFoundError(ZkBuildError):
    """Raised when the named contract file is not under the source tree.

    Attributes:
        contract_name: Contract identifier as given by the user.
        source_root: Directory that was searched.
    """

    kind = DiagnosticKind.CONTRACT_NOT_FOUND

    def __init__(
        self,
        contract_name: str,
        source_root: str,
        *,
        reason: str = "does not exist",
    ) -> None:
        super().__init__(f"'{contract_name}' {reason} under {source_root}")
        self.contract_name = contract_name
        self.source_root = source_root


class InvokeError(ZkBuildError):
    """Base class for failures while running the compiler process."""

    kind = DiagnosticKind.SPAWN_ERROR


class SpawnError(InvokeError):
    """Raised when the compiler binary cannot be started.

    Attributes:
        binary_path: Binary that could not be run.
    """

    kind = DiagnosticKind.SPAWN_ERROR

    def __init__(
        self,
        user_message: str,
        *,
        binary_path: str,
        internal_details: str | None = None,
    ) -> None:
        super().__init__(user_message, internal_details=internal_details)
        self.binary_path = binary_path


class SerializationError(InvokeError):
    """Raised when a compilation request cannot be serialized to JSON."""

    kind = DiagnosticKind.SERIALIZATION_ERROR


class NonZeroExitError(InvokeError):
    """Raised when the compiler ran but exited with a non-zero status.

    This is an expected, recoverable outcome rather than a crash.

    Attributes:
        exit_code: Process exit status.
        stderr: Captured standard error text.
    """

    kind = DiagnosticKind.NON_ZERO_EXIT

    def __init__(self, exit_code: int, stderr: str) -> None:
        detail = stderr.strip() or "no output on stderr"
        super().__init__(f"exit code {exit_code}: {detail}")
        self.exit_code = exit_code
        self.stderr = stderr
