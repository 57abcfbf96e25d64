"""zksolc build pipeline.

Runs the stages for one contract in order and stops at the first failure:

    version spec -> compiler binary -> request -> zksolc -> outcome

Every failure is returned as a CompilationOutcome rather than raised, so
the caller gets one value to report on. The pipeline writes no artifacts.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from enum import Enum

import structlog

from zkbuild_core.compilation.interpreter import interpret
from zkbuild_core.compilation.invoker import CompilerRunner, invoke
from zkbuild_core.compilation.models import CompilationOutcome
from zkbuild_core.compilation.request import CompilerSettings, build_request
from zkbuild_core.config import DEFAULT_ZKSOLC_VERSION, ZkBuildSettings
from zkbuild_core.errors import ZkBuildError
from zkbuild_core.manager.manager import (
    CompilerDownloader,
    CompilerManager,
    CompilerManagerOptions,
)
from zkbuild_core.project import ProjectConfig

logger = structlog.get_logger(__name__)


class BuildStage(str, Enum):
    """Progress points reported to the caller.

    Attributes:
        DOWNLOADING: The compiler binary is about to be downloaded
        COMPILING: The compiler is about to run
        COMPILED: The compiler finished and its output passed
    """

    DOWNLOADING = "downloading"
    COMPILING = "compiling"
    COMPILED = "compiled"


ProgressCallback = Callable[[BuildStage], None]


class BuildPipeline:
    """Compile one contract with zksolc, acquiring the compiler as needed.

    Attributes:
        settings: Environment-derived settings (compilers dir, download URL).

    Example:
        >>> pipeline = BuildPipeline(ZkBuildSettings.from_env())
        >>> outcome = pipeline.compile("Foo.sol", ProjectConfig.discover("."))
        >>> outcome.passed
        True
    """

    def __init__(
        self,
        settings: ZkBuildSettings | None = None,
        *,
        runner: CompilerRunner | None = None,
        downloader: CompilerDownloader | None = None,
        progress: ProgressCallback | None = None,
    ) -> None:
        """Initialize the pipeline.

        Args:
            settings: Settings to use. Read from the environment if None.
            runner: Compiler process runner. A subprocess runner if None.
            downloader: Compiler downloader. An HTTP downloader if None.
            progress: Called at each BuildStage.
        """
        self.settings = settings or ZkBuildSettings.from_env()
        self._runner = runner
        self._downloader = downloader
        self._progress = progress
        self._log = logger.bind(component="build_pipeline")

    def _report(self, stage: BuildStage) -> None:
        if self._progress is not None:
            self._progress(stage)

    def compile(
        self,
        contract_name: str,
        project: ProjectConfig,
        *,
        version: str = DEFAULT_ZKSOLC_VERSION,
        is_system_mode: bool = False,
        compiler_settings: CompilerSettings | None = None,
    ) -> CompilationOutcome:
        """Compile a contract.

        Args:
            contract_name: Contract file name relative to the source directory.
            project: Resolved project model.
            version: zksolc version spec (x.y.z, solc:x.y.z, or a path).
            is_system_mode: Compile in zkSync system mode.
            compiler_settings: Settings override. Derived from project if None.

        Returns:
            Success with the artifacts of the contract's source file, or
            Failure naming the first stage that failed.
        """
        start_time = time.monotonic()
        log = self._log.bind(contract=contract_name, version=version)
        log.info("build_started", is_system_mode=is_system_mode)

        try:
            outcome = self._run(
                contract_name,
                project,
                version=version,
                is_system_mode=is_system_mode,
                compiler_settings=compiler_settings,
            )
        except ZkBuildError as e:
            log.warning("build_failed", kind=e.kind.value, error=e.user_message)
            return CompilationOutcome.failure(e.kind, [e.user_message])

        duration_ms = int((time.monotonic() - start_time) * 1000)
        log.info(
            "build_completed",
            status=outcome.status.value,
            artifacts=len(outcome.artifacts),
            duration_ms=duration_ms,
        )
        return outcome

    def _run(
        self,
        contract_name: str,
        project: ProjectConfig,
        *,
        version: str,
        is_system_mode: bool,
        compiler_settings: CompilerSettings | None,
    ) -> CompilationOutcome:
        options = CompilerManagerOptions.from_settings(version, self.settings)
        manager = CompilerManager.build(options, downloader=self._downloader)
        binary_path = manager.ensure_compiler(
            on_download=lambda _: self._report(BuildStage.DOWNLOADING)
        )

        request = build_request(
            contract_name,
            project,
            compiler_settings or CompilerSettings.from_project(project),
            is_system_mode,
        )

        self._report(BuildStage.COMPILING)
        raw = invoke(binary_path, request, self._runner)

        outcome = interpret(raw)
        if outcome.failed:
            return outcome

        self._report(BuildStage.COMPILED)
        return outcome.for_source(request.entry_source)


def compile_contract(
    contract_name: str,
    project: ProjectConfig,
    *,
    version: str = DEFAULT_ZKSOLC_VERSION,
    is_system_mode: bool = False,
    compiler_settings: CompilerSettings | None = None,
    settings: ZkBuildSettings | None = None,
    runner: CompilerRunner | None = None,
    downloader: CompilerDownloader | None = None,
    progress: ProgressCallback | None = None,
) -> CompilationOutcome:
    """Compile one contract with a throwaway BuildPipeline.

    See BuildPipeline.compile for arguments and return value.
    """
    pipeline = BuildPipeline(settings, runner=runner, downloader=downloader, progress=progress)
    return pipeline.compile(
        contract_name,
        project,
        version=version,
        is_system_mode=is_system_mode,
        compiler_settings=compiler_settings,
    )
