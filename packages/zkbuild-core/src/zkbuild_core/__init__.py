"""zkbuild-core: zksolc compiler acquisition and invocation for zkSync builds.

This package provides:
- CompilerManager: Resolve a zksolc version and make its binary available
- build_request / invoke / interpret: The compilation stages
- BuildPipeline: Run every stage for one contract
- ProjectConfig: Minimal project model read from zkbuild.yaml
"""

from __future__ import annotations

__version__ = "0.1.0"

# Compilation stages and models
from zkbuild_core.compilation import (
    CompilationOutcome,
    CompilationRequest,
    CompilerRunner,
    CompilerSettings,
    ContractArtifact,
    Diagnostic,
    OutcomeStatus,
    RawOutput,
    SubprocessRunner,
    build_request,
    interpret,
    invoke,
)

# Settings
from zkbuild_core.config import DEFAULT_ZKSOLC_VERSION, ZkBuildSettings

# Error types
from zkbuild_core.errors import (
    CacheDirUnavailableError,
    ContractNotFoundError,
    DiagnosticKind,
    DownloadError,
    InvalidVersionSpecError,
    InvokeError,
    NetworkError,
    NonZeroExitError,
    SerializationError,
    SpawnError,
    UnsupportedPlatformError,
    WriteError,
    ZkBuildError,
    describe_failure,
)

# Compiler acquisition
from zkbuild_core.manager import (
    BinaryDownloader,
    CompilerManager,
    CompilerManagerOptions,
    LocalPath,
    RemoteVersion,
    VersionSpec,
    ensure_compilers_dir,
    resolve_version_spec,
)

# Pipeline
from zkbuild_core.pipeline import BuildPipeline, BuildStage, compile_contract

# Project model
from zkbuild_core.project import OptimizerSettings, ProjectConfig

__all__ = [
    "__version__",
    # Pipeline
    "BuildPipeline",
    "BuildStage",
    "compile_contract",
    # Compiler acquisition
    "CompilerManager",
    "CompilerManagerOptions",
    "BinaryDownloader",
    "VersionSpec",
    "RemoteVersion",
    "LocalPath",
    "resolve_version_spec",
    "ensure_compilers_dir",
    # Compilation
    "CompilationRequest",
    "CompilerSettings",
    "CompilerRunner",
    "SubprocessRunner",
    "RawOutput",
    "CompilationOutcome",
    "OutcomeStatus",
    "ContractArtifact",
    "Diagnostic",
    "build_request",
    "invoke",
    "interpret",
    # Settings and project
    "ZkBuildSettings",
    "DEFAULT_ZKSOLC_VERSION",
    "ProjectConfig",
    "OptimizerSettings",
    # Errors
    "ZkBuildError",
    "DiagnosticKind",
    "describe_failure",
    "InvalidVersionSpecError",
    "CacheDirUnavailableError",
    "DownloadError",
    "NetworkError",
    "WriteError",
    "UnsupportedPlatformError",
    "ContractNotFoundError",
    "InvokeError",
    "SpawnError",
    "SerializationError",
    "NonZeroExitError",
]
