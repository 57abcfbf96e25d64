"""Result interpreter: zksolc standard-JSON output -> CompilationOutcome."""

from __future__ import annotations

import json
from typing import Any

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from zkbuild_core.compilation.models import (
    CompilationOutcome,
    ContractArtifact,
    Diagnostic,
    RawOutput,
)
from zkbuild_core.errors import DiagnosticKind

logger = structlog.get_logger(__name__)


class _OutputModel(BaseModel):
    # zksolc adds fields between releases; only what is read here is checked
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class _Bytecode(_OutputModel):
    object_: str = Field(default="", alias="object")


class _Evm(_OutputModel):
    bytecode: _Bytecode = Field(default_factory=_Bytecode)
    method_identifiers: dict[str, str] = Field(default_factory=dict, alias="methodIdentifiers")


class _Contract(_OutputModel):
    abi: list[dict[str, Any]] | None = None
    evm: _Evm = Field(default_factory=_Evm)
    hash: str | None = None
    factory_dependencies: dict[str, str] = Field(
        default_factory=dict, alias="factoryDependencies"
    )


class _SourceLocation(_OutputModel):
    file: str | None = None


class _Error(_OutputModel):
    severity: str = Field(..., min_length=1)
    message: str
    formatted_message: str | None = Field(default=None, alias="formattedMessage")
    type: str | None = None
    source_location: _SourceLocation | None = Field(default=None, alias="sourceLocation")


class _Output(_OutputModel):
    errors: list[_Error] = Field(default_factory=list)
    contracts: dict[str, dict[str, _Contract]] = Field(default_factory=dict)
    version: str | None = None
    zk_version: str | None = None


def _malformed(raw: RawOutput, reason: str) -> CompilationOutcome:
    logger.warning("compiler_output_malformed", reason=reason)
    return CompilationOutcome.failure(
        DiagnosticKind.MALFORMED_OUTPUT,
        [raw.stdout or reason],
    )


def interpret(raw: RawOutput) -> CompilationOutcome:
    """Classify zksolc output as success or failure.

    Error diagnostics make the compilation fail; their text is kept
    verbatim. Warnings never do, and are kept on the outcome either way.

    Args:
        raw: Captured output of a successful compiler run.

    Returns:
        Success with one artifact per compiled contract, or Failure with
        COMPILER_REPORTED_ERROR or MALFORMED_OUTPUT.
    """
    if not raw.stdout.strip():
        return _malformed(raw, "compiler produced no output")

    try:
        document = json.loads(raw.stdout)
    except json.JSONDecodeError as e:
        return _malformed(raw, f"output is not JSON: {e}")

    if not isinstance(document, dict):
        return _malformed(raw, "output is not a JSON object")

    try:
        output = _Output.model_validate(document)
    except ValidationError as e:
        return _malformed(raw, f"output does not match the standard-JSON schema: {e}")

    diagnostics = [
        Diagnostic(
            severity=err.severity,
            message=err.message,
            formatted_message=err.formatted_message,
            error_type=err.type,
            source_file=err.source_location.file if err.source_location else None,
        )
        for err in output.errors
    ]
    errors = [d for d in diagnostics if d.is_error]

    if errors:
        logger.info("compiler_reported_errors", errors=len(errors), diagnostics=len(diagnostics))
        return CompilationOutcome.failure(
            DiagnosticKind.COMPILER_REPORTED_ERROR,
            [d.text for d in errors],
            diagnostics,
        )

    artifacts = [
        ContractArtifact(
            name=name,
            source=source,
            abi=contract.abi or [],
            bytecode=contract.evm.bytecode.object_,
            bytecode_hash=contract.hash,
            method_identifiers=contract.evm.method_identifiers,
            factory_dependencies=contract.factory_dependencies,
        )
        for source, contracts in sorted(output.contracts.items())
        for name, contract in sorted(contracts.items())
    ]

    logger.info("compiler_output_parsed", artifacts=len(artifacts), warnings=len(diagnostics))
    return CompilationOutcome.success(
        artifacts,
        diagnostics,
        compiler_version=output.zk_version or output.version,
    )
