"""Compilation request builder.

Turns a project model and one contract file name into a fully populated
zksolc standard-JSON request. Every Solidity file under the source and
library directories is sent along, so imports resolve without the builder
having to understand the language.
"""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from zkbuild_core.compilation.models import CompilationRequest, RequestSettings
from zkbuild_core.errors import ContractNotFoundError, SerializationError
from zkbuild_core.project import OptimizerSettings, ProjectConfig

logger = logging.getLogger(__name__)

SOLIDITY_SUFFIX = ".sol"


class CompilerSettings(BaseModel):
    """Compiler options for a build, independent of the contract.

    Attributes:
        optimizer: Optimizer settings.
        force_evmla: Force the EVM legacy assembly pipeline.
        remappings: Import remappings.
        libraries: Deployed library addresses.
        solc_path: solc binary zksolc should drive, if any.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    optimizer: OptimizerSettings = Field(default_factory=OptimizerSettings)
    force_evmla: bool = False
    remappings: list[str] = Field(default_factory=list)
    libraries: dict[str, dict[str, str]] = Field(default_factory=dict)
    solc_path: Path | None = None

    @classmethod
    def from_project(cls, project: ProjectConfig) -> CompilerSettings:
        """Derive compiler settings from the project model."""
        solc = project.solc
        if solc is not None and not solc.is_absolute() and len(solc.parts) > 1:
            # a bare name like "solc" is looked up on PATH by zksolc
            solc = project.root / solc
        return cls(
            optimizer=project.optimizer,
            force_evmla=project.force_evmla,
            remappings=list(project.remappings),
            libraries=dict(project.libraries),
            solc_path=solc,
        )


def _source_key(path: Path, project_root: Path) -> str:
    try:
        return path.relative_to(project_root).as_posix()
    except ValueError:
        # library directory outside the project
        return path.as_posix()


def resolve_contract(contract_name: str, source_root: Path) -> Path:
    """Find the file of a contract under the source directory.

    A name is first taken as a path relative to the source directory. A bare
    file name that is not found there is searched for recursively and must
    match exactly one file.

    Args:
        contract_name: Contract file name, e.g. "Foo.sol" or "tokens/Foo.sol".
        source_root: Absolute, resolved source directory.

    Returns:
        Resolved path of the contract file.

    Raises:
        ContractNotFoundError: If the file is not a .sol file, is missing,
            is ambiguous, or lies outside the source directory.
    """
    name = contract_name.strip()
    root = str(source_root)

    if not name.endswith(SOLIDITY_SUFFIX):
        raise ContractNotFoundError(
            contract_name, root, reason="is not a Solidity source file (.sol)"
        )
    if not source_root.is_dir():
        raise ContractNotFoundError(
            contract_name, root, reason="does not exist (no source directory)"
        )

    candidate = (source_root / name).resolve()
    if not candidate.is_relative_to(source_root):
        raise ContractNotFoundError(
            contract_name, root, reason="resolves outside the source directory"
        )
    if candidate.is_file():
        return candidate

    if Path(name).name == name:
        matches = sorted(p for p in source_root.rglob(name) if p.is_file())
        if len(matches) == 1:
            logger.debug("Resolved %s to %s", contract_name, matches[0])
            return matches[0].resolve()
        if len(matches) > 1:
            found = ", ".join(p.relative_to(source_root).as_posix() for p in matches)
            raise ContractNotFoundError(
                contract_name, root, reason=f"is ambiguous (found {found})"
            )

    raise ContractNotFoundError(contract_name, root)


def collect_sources(project: ProjectConfig) -> dict[str, str]:
    """Read every Solidity file under the source and library directories.

    Args:
        project: Project model.

    Returns:
        Source key (POSIX path relative to the project root) -> content,
        ordered by key.

    Raises:
        SerializationError: If a source file cannot be read as UTF-8 text.
    """
    project_root = project.root.resolve()
    sources: dict[str, str] = {}

    for directory in [project.source_root, *project.library_roots]:
        directory = directory.resolve()
        if not directory.is_dir():
            logger.debug("Skipping missing source directory %s", directory)
            continue
        for path in directory.rglob(f"*{SOLIDITY_SUFFIX}"):
            if not path.is_file():
                continue
            key = _source_key(path, project_root)
            if key in sources:
                continue
            try:
                sources[key] = path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                raise SerializationError(
                    f"cannot read source file {path}: {e}",
                    internal_details=repr(e),
                ) from e

    logger.debug("Collected %d source files", len(sources))
    return dict(sorted(sources.items()))


def build_request(
    contract_name: str,
    project: ProjectConfig,
    settings: CompilerSettings | None = None,
    is_system_mode: bool = False,
) -> CompilationRequest:
    """Assemble the zksolc request for one contract.

    Args:
        contract_name: Contract file name relative to the source directory.
        project: Resolved project model.
        settings: Compiler settings. Derived from the project if None.
        is_system_mode: Value of the ``isSystem`` flag, passed through as is.

    Returns:
        Fully constructed CompilationRequest.

    Raises:
        ContractNotFoundError: If the contract file cannot be located.
        SerializationError: If a source file cannot be read.

    Example:
        >>> request = build_request("Foo.sol", ProjectConfig(root=Path(".")))
        >>> request.entry_source
        'src/Foo.sol'
    """
    if settings is None:
        settings = CompilerSettings.from_project(project)

    project_root = project.root.resolve()
    contract_path = resolve_contract(contract_name, project.source_root.resolve())
    entry_source = _source_key(contract_path, project_root)

    sources = collect_sources(project)
    if entry_source not in sources:
        raise ContractNotFoundError(
            contract_name, str(project.source_root), reason="could not be read"
        )

    request = CompilationRequest(
        contract_name=contract_name,
        project_root=project_root,
        entry_source=entry_source,
        sources=sources,
        settings=RequestSettings(
            optimizer=settings.optimizer,
            is_system=is_system_mode,
            force_evmla=settings.force_evmla,
            remappings=settings.remappings,
            libraries=settings.libraries,
        ),
        solc_path=settings.solc_path,
    )
    logger.info(
        "Built request for %s (%d sources, system mode %s)",
        entry_source,
        len(sources),
        is_system_mode,
    )
    return request
