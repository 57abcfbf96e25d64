"""Compilation stages for zkbuild.

- build_request: Assemble the standard-JSON request for one contract
- invoke: Run zksolc on a request and capture its output
- interpret: Turn compiler output into a CompilationOutcome
"""

from __future__ import annotations

from zkbuild_core.compilation.interpreter import interpret
from zkbuild_core.compilation.invoker import (
    CompilerRunner,
    SubprocessRunner,
    invoke,
    serialize_request,
)
from zkbuild_core.compilation.models import (
    CompilationOutcome,
    CompilationRequest,
    ContractArtifact,
    Diagnostic,
    OutcomeStatus,
    RawOutput,
    RequestSettings,
)
from zkbuild_core.compilation.request import (
    CompilerSettings,
    build_request,
    collect_sources,
    resolve_contract,
)

__all__: list[str] = [
    # Models
    "CompilationRequest",
    "RequestSettings",
    "RawOutput",
    "CompilationOutcome",
    "OutcomeStatus",
    "ContractArtifact",
    "Diagnostic",
    # Request builder
    "CompilerSettings",
    "build_request",
    "collect_sources",
    "resolve_contract",
    # Invoker
    "CompilerRunner",
    "SubprocessRunner",
    "invoke",
    "serialize_request",
    # Interpreter
    "interpret",
]
