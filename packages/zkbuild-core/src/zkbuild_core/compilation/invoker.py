"""Compiler invoker: run zksolc on a request and capture what it prints.

The invoker only knows about processes. It never looks inside the
compiler's output; see zkbuild_core.compilation.interpreter for that.
"""

from __future__ import annotations

import json
import subprocess
from collections.abc import Sequence
from pathlib import Path
from typing import Protocol

import structlog

from zkbuild_core.compilation.models import CompilationRequest, RawOutput
from zkbuild_core.errors import NonZeroExitError, SerializationError, SpawnError

logger = structlog.get_logger(__name__)


class CompilerRunner(Protocol):
    """Runs a compiler command with the request document on stdin.

    Implementations raise OSError when the process cannot be started.
    """

    def run(self, args: Sequence[str], input_text: str) -> RawOutput: ...


class SubprocessRunner:
    """CompilerRunner backed by subprocess.run.

    No timeout is applied; zksolc runs until it finishes.
    """

    def run(self, args: Sequence[str], input_text: str) -> RawOutput:
        completed = subprocess.run(
            list(args),
            input=input_text,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            check=False,
        )
        return RawOutput(
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
            exit_code=completed.returncode,
        )


def serialize_request(request: CompilationRequest) -> str:
    """Serialize a request to the JSON text zksolc reads from stdin.

    Raises:
        SerializationError: If the request cannot be encoded.
    """
    try:
        return json.dumps(request.to_standard_json())
    except (TypeError, ValueError) as e:
        raise SerializationError(
            f"cannot encode request for {request.entry_source}: {e}",
            internal_details=repr(e),
        ) from e


def invoke(
    binary_path: Path,
    request: CompilationRequest,
    runner: CompilerRunner | None = None,
) -> RawOutput:
    """Run zksolc in standard-JSON mode on a request.

    Args:
        binary_path: Path of the zksolc executable.
        request: Fully constructed compilation request.
        runner: Process runner. SubprocessRunner if None.

    Returns:
        RawOutput of a run that exited with status 0.

    Raises:
        SerializationError: If the request cannot be encoded.
        SpawnError: If the binary cannot be started.
        NonZeroExitError: If the compiler exits with a non-zero status.
    """
    payload = serialize_request(request)
    args = [str(binary_path), *request.command_args()]
    runner = runner or SubprocessRunner()
    log = logger.bind(binary=str(binary_path), entry_source=request.entry_source)

    log.info("compiler_invoked", args=args[1:], request_bytes=len(payload))
    try:
        raw = runner.run(args, payload)
    except OSError as e:
        raise SpawnError(
            f"cannot run {binary_path}: {e.strerror or e}",
            binary_path=str(binary_path),
            internal_details=repr(e),
        ) from e

    if raw.exit_code != 0:
        log.warning("compiler_failed", exit_code=raw.exit_code)
        raise NonZeroExitError(raw.exit_code, raw.stderr)

    log.info("compiler_finished", stdout_bytes=len(raw.stdout))
    return raw
