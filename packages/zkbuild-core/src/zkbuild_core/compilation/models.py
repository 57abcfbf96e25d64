"""Models exchanged between the zksolc compilation stages.

- CompilationRequest: standard-JSON input for one contract entry point
- RawOutput: what the compiler process printed and how it exited
- CompilationOutcome: pass/fail result with artifacts or diagnostics
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from zkbuild_core.errors import DiagnosticKind, describe_failure
from zkbuild_core.project import OptimizerSettings

DEFAULT_OUTPUT_SELECTION: dict[str, dict[str, list[str]]] = {
    "*": {
        "*": ["abi", "evm.methodIdentifiers"],
        "": ["metadata"],
    },
}


class RequestSettings(BaseModel):
    """The ``settings`` block of a zksolc standard-JSON request.

    Field aliases match the zksolc schema; dump with ``by_alias=True``.

    Attributes:
        optimizer: Optimizer settings.
        is_system: System mode flag (``isSystem``), passed through untouched.
        force_evmla: Force the EVM legacy assembly pipeline (``forceEVMLA``).
        remappings: Import remappings.
        libraries: Deployed library addresses.
        output_selection: Requested outputs (``outputSelection``).
    """

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    optimizer: OptimizerSettings = Field(default_factory=OptimizerSettings)
    is_system: bool = Field(default=False, alias="isSystem")
    force_evmla: bool = Field(default=False, alias="forceEVMLA")
    remappings: list[str] = Field(default_factory=list)
    libraries: dict[str, dict[str, str]] = Field(default_factory=dict)
    output_selection: dict[str, dict[str, list[str]]] = Field(
        default_factory=lambda: {k: dict(v) for k, v in DEFAULT_OUTPUT_SELECTION.items()},
        alias="outputSelection",
    )


class CompilationRequest(BaseModel):
    """One zksolc invocation for a single contract entry point.

    Attributes:
        contract_name: Contract identifier as given by the caller.
        project_root: Project root; source keys are relative to it.
        entry_source: Source key of the contract being built.
        sources: Source key -> file content.
        settings: Standard-JSON settings block.
        solc_path: solc binary passed to zksolc with ``--solc``, if any.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    contract_name: str = Field(..., min_length=1)
    project_root: Path
    entry_source: str = Field(..., min_length=1)
    sources: dict[str, str]
    settings: RequestSettings = Field(default_factory=RequestSettings)
    solc_path: Path | None = None

    def to_standard_json(self) -> dict[str, Any]:
        """Return the request as a zksolc standard-JSON document."""
        return {
            "language": "Solidity",
            "sources": {key: {"content": content} for key, content in self.sources.items()},
            "settings": self.settings.model_dump(mode="json", by_alias=True),
        }

    def command_args(self) -> list[str]:
        """Return zksolc command-line arguments for this request."""
        args = ["--standard-json"]
        if self.solc_path is not None:
            args.extend(["--solc", str(self.solc_path)])
        return args


class RawOutput(BaseModel):
    """Captured result of one compiler process run.

    Attributes:
        stdout: Standard output text.
        stderr: Standard error text.
        exit_code: Process exit status.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    stdout: str = ""
    stderr: str = ""
    exit_code: int = 0


class OutcomeStatus(str, Enum):
    """Status of a compilation.

    Attributes:
        SUCCESS: Compiler produced artifacts without error diagnostics
        FAILURE: Compilation did not produce usable artifacts
    """

    SUCCESS = "success"
    FAILURE = "failure"


class Diagnostic(BaseModel):
    """A message reported by the compiler.

    Attributes:
        severity: "error", "warning" or "info".
        message: Message text, verbatim.
        formatted_message: Message with source excerpt, if provided.
        error_type: Compiler error class, e.g. "ParserError".
        source_file: Source key the message points at, if any.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    severity: str = Field(..., min_length=1)
    message: str
    formatted_message: str | None = None
    error_type: str | None = None
    source_file: str | None = None

    @property
    def is_error(self) -> bool:
        return self.severity.lower() == "error"

    @property
    def text(self) -> str:
        """Best text to show a user: formatted message if present."""
        return self.formatted_message or self.message


class ContractArtifact(BaseModel):
    """Compiled output of one contract.

    Attributes:
        name: Contract name, e.g. "Foo".
        source: Source key the contract was declared in, e.g. "src/Foo.sol".
        abi: Interface description.
        bytecode: Hex bytecode (zkEVM).
        bytecode_hash: zkSync bytecode hash, if reported.
        method_identifiers: Function signature -> selector.
        factory_dependencies: Bytecode hash -> contract path of dependencies.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(..., min_length=1)
    source: str = Field(..., min_length=1)
    abi: list[dict[str, Any]] = Field(default_factory=list)
    bytecode: str = ""
    bytecode_hash: str | None = None
    method_identifiers: dict[str, str] = Field(default_factory=dict)
    factory_dependencies: dict[str, str] = Field(default_factory=dict)


class CompilationOutcome(BaseModel):
    """Pass/fail result of compiling one contract.

    Either ``Success(artifacts)`` or ``Failure(kind, messages)``; diagnostics
    (warnings included) are kept in both cases.

    Example:
        >>> outcome = CompilationOutcome.failure(
        ...     DiagnosticKind.CONTRACT_NOT_FOUND, ["'Missing.sol' does not exist"]
        ... )
        >>> outcome.failed
        True
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    status: OutcomeStatus
    kind: DiagnosticKind | None = None
    messages: list[str] = Field(default_factory=list)
    artifacts: list[ContractArtifact] = Field(default_factory=list)
    diagnostics: list[Diagnostic] = Field(default_factory=list)
    compiler_version: str | None = None

    @classmethod
    def success(
        cls,
        artifacts: list[ContractArtifact],
        diagnostics: list[Diagnostic] | None = None,
        compiler_version: str | None = None,
    ) -> CompilationOutcome:
        return cls(
            status=OutcomeStatus.SUCCESS,
            artifacts=artifacts,
            diagnostics=diagnostics or [],
            compiler_version=compiler_version,
        )

    @classmethod
    def failure(
        cls,
        kind: DiagnosticKind,
        messages: list[str],
        diagnostics: list[Diagnostic] | None = None,
    ) -> CompilationOutcome:
        return cls(
            status=OutcomeStatus.FAILURE,
            kind=kind,
            messages=messages,
            diagnostics=diagnostics or [],
        )

    @property
    def passed(self) -> bool:
        return self.status == OutcomeStatus.SUCCESS

    @property
    def failed(self) -> bool:
        return self.status == OutcomeStatus.FAILURE

    @property
    def warnings(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if not d.is_error]

    def artifact(self, name: str) -> ContractArtifact | None:
        """Return the artifact for a contract name, if present."""
        return next((a for a in self.artifacts if a.name == name), None)

    def for_source(self, source: str) -> CompilationOutcome:
        """Return a copy keeping only artifacts declared in source."""
        return self.model_copy(
            update={"artifacts": [a for a in self.artifacts if a.source == source]}
        )

    def describe(self) -> str:
        """Return user-facing text for a failure ("" on success)."""
        if self.kind is None:
            return ""
        return describe_failure(self.kind, "\n".join(self.messages))
