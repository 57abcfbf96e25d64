"""Integration tests for the zksolc build pipeline.

These tests run every stage together (version resolution, compiler
acquisition, request building, invocation and interpretation) with test
doubles standing in for the network and, where noted, the zksolc binary.
"""

from __future__ import annotations

import sys
from pathlib import Path

import httpx
import pytest
from structlog.testing import capture_logs

from testing.fixtures.zksolc import (
    BAR_SOL,
    FOO_SOL,
    TEST_PLATFORM,
    FakeCompilerRunner,
    FakeDownloader,
    diagnostic,
    write_fake_zksolc,
    write_project,
    zksolc_output,
)
from zkbuild_core.compilation.request import CompilerSettings
from zkbuild_core.config import ZkBuildSettings
from zkbuild_core.errors import DiagnosticKind
from zkbuild_core.manager.downloader import BinaryDownloader
from zkbuild_core.pipeline import BuildPipeline, BuildStage, compile_contract
from zkbuild_core.project import ProjectConfig

pytestmark = pytest.mark.integration

posix_only = pytest.mark.skipif(sys.platform == "win32", reason="uses a shell script")


@pytest.fixture
def settings(compilers_dir: Path) -> ZkBuildSettings:
    return ZkBuildSettings(compilers_dir=compilers_dir)


@pytest.fixture
def project(tmp_path: Path) -> ProjectConfig:
    root = write_project(
        tmp_path / "project",
        {"src/Foo.sol": FOO_SOL, "src/Bar.sol": BAR_SOL},
    )
    return ProjectConfig.discover(root)


class TestSuccessfulBuild:
    """Builds that reach the COMPILED stage."""

    def test_compiles_entry_contract(
        self, project: ProjectConfig, settings: ZkBuildSettings
    ) -> None:
        """Only artifacts declared in the entry source are returned."""
        runner = FakeCompilerRunner(zksolc_output({"src/Foo.sol": ["Foo"], "src/Bar.sol": ["Bar"]}))
        downloader = FakeDownloader()
        stages: list[BuildStage] = []

        outcome = compile_contract(
            "Foo.sol",
            project,
            version="solc:1.3.9",
            settings=settings,
            runner=runner,
            downloader=downloader,
            progress=stages.append,
        )

        assert outcome.passed, outcome.describe()
        assert [a.name for a in outcome.artifacts] == ["Foo"]
        assert outcome.compiler_version == "1.3.9"
        assert stages == [BuildStage.DOWNLOADING, BuildStage.COMPILING, BuildStage.COMPILED]
        assert downloader.downloads == ["1.3.9"]

    def test_sends_whole_source_tree(
        self, project: ProjectConfig, settings: ZkBuildSettings
    ) -> None:
        runner = FakeCompilerRunner()

        compile_contract(
            "Foo.sol",
            project,
            settings=settings,
            runner=runner,
            downloader=FakeDownloader(),
        )

        document = runner.last_request
        assert sorted(document["sources"]) == ["src/Bar.sol", "src/Foo.sol"]
        assert document["sources"]["src/Foo.sol"]["content"] == FOO_SOL
        assert runner.calls[-1][0] == ["--standard-json"]

    def test_cached_compiler_is_reused(
        self, project: ProjectConfig, settings: ZkBuildSettings
    ) -> None:
        """A second build with the same version skips the download stage."""
        downloader = FakeDownloader()
        pipeline = BuildPipeline(settings, runner=FakeCompilerRunner(), downloader=downloader)
        pipeline.compile("Foo.sol", project, version="1.3.9")

        stages: list[BuildStage] = []
        second = BuildPipeline(
            settings,
            runner=FakeCompilerRunner(),
            downloader=downloader,
            progress=stages.append,
        )
        outcome = second.compile("Foo.sol", project, version="1.3.9")

        assert outcome.passed
        assert stages == [BuildStage.COMPILING, BuildStage.COMPILED]
        assert downloader.downloads == ["1.3.9"]

    def test_versions_are_cached_separately(
        self, project: ProjectConfig, settings: ZkBuildSettings
    ) -> None:
        downloader = FakeDownloader()
        pipeline = BuildPipeline(settings, runner=FakeCompilerRunner(), downloader=downloader)

        pipeline.compile("Foo.sol", project, version="1.3.8")
        pipeline.compile("Foo.sol", project, version="1.3.9")

        assert downloader.downloads == ["1.3.8", "1.3.9"]
        assert sorted(p.name for p in settings.compilers_dir.iterdir()) == [
            TEST_PLATFORM.binary_name("1.3.8"),
            TEST_PLATFORM.binary_name("1.3.9"),
        ]

    def test_system_mode_is_passed_through(
        self, project: ProjectConfig, settings: ZkBuildSettings
    ) -> None:
        runner = FakeCompilerRunner()

        outcome = compile_contract(
            "Foo.sol",
            project,
            is_system_mode=True,
            settings=settings,
            runner=runner,
            downloader=FakeDownloader(),
        )

        assert outcome.passed
        assert runner.last_request["settings"]["isSystem"] is True

    def test_compiler_settings_override(
        self, project: ProjectConfig, settings: ZkBuildSettings
    ) -> None:
        """Explicit compiler settings replace the ones derived from the project."""
        runner = FakeCompilerRunner()

        outcome = compile_contract(
            "Foo.sol",
            project,
            compiler_settings=CompilerSettings(force_evmla=True, remappings=["@oz/=lib/oz/"]),
            settings=settings,
            runner=runner,
            downloader=FakeDownloader(),
        )

        assert outcome.passed
        request_settings = runner.last_request["settings"]
        assert request_settings["forceEVMLA"] is True
        assert request_settings["remappings"] == ["@oz/=lib/oz/"]

    def test_logs_build_events(self, project: ProjectConfig, settings: ZkBuildSettings) -> None:
        with capture_logs() as logs:
            compile_contract(
                "Foo.sol",
                project,
                settings=settings,
                runner=FakeCompilerRunner(),
                downloader=FakeDownloader(),
            )

        events = [entry["event"] for entry in logs]
        assert "build_started" in events
        assert "build_completed" in events

    @posix_only
    def test_local_compiler_script(
        self, project: ProjectConfig, settings: ZkBuildSettings, tmp_path: Path
    ) -> None:
        """A path version runs that binary directly, with no download."""
        script = write_fake_zksolc(
            tmp_path / "bin" / "zksolc", zksolc_output({"src/Foo.sol": ["Foo"]})
        )
        stages: list[BuildStage] = []

        outcome = compile_contract(
            "Foo.sol",
            project,
            version=str(script),
            settings=settings,
            progress=stages.append,
        )

        assert outcome.passed, outcome.describe()
        assert [a.name for a in outcome.artifacts] == ["Foo"]
        assert stages == [BuildStage.COMPILING, BuildStage.COMPILED]


class TestFailedBuild:
    """Builds that stop with a Failure outcome."""

    def test_missing_contract(self, project: ProjectConfig, settings: ZkBuildSettings) -> None:
        """The compiler is never run for a contract that does not exist."""
        runner = FakeCompilerRunner()

        outcome = compile_contract(
            "Missing.sol",
            project,
            settings=settings,
            runner=runner,
            downloader=FakeDownloader(),
        )

        assert outcome.failed
        assert outcome.kind == DiagnosticKind.CONTRACT_NOT_FOUND
        assert "Missing.sol" in outcome.messages[0]
        assert not runner.called

    @pytest.mark.parametrize("version", ["solc:latest", "solc:1.3", "zksolc:"])
    def test_invalid_version(
        self, project: ProjectConfig, settings: ZkBuildSettings, version: str
    ) -> None:
        runner = FakeCompilerRunner()
        downloader = FakeDownloader()

        outcome = compile_contract(
            "Foo.sol",
            project,
            version=version,
            settings=settings,
            runner=runner,
            downloader=downloader,
        )

        assert outcome.kind == DiagnosticKind.INVALID_VERSION_SPEC
        assert downloader.downloads == []
        assert not runner.called

    def test_compiler_reported_error(
        self, project: ProjectConfig, settings: ZkBuildSettings
    ) -> None:
        error = diagnostic("Expected ';' but got '}'", formatted_message="ParserError: ;")
        stages: list[BuildStage] = []

        outcome = compile_contract(
            "Foo.sol",
            project,
            settings=settings,
            runner=FakeCompilerRunner(zksolc_output(errors=[error])),
            downloader=FakeDownloader(),
            progress=stages.append,
        )

        assert outcome.kind == DiagnosticKind.COMPILER_REPORTED_ERROR
        assert outcome.messages == ["ParserError: ;"]
        assert BuildStage.COMPILED not in stages

    def test_non_zero_exit(self, project: ProjectConfig, settings: ZkBuildSettings) -> None:
        runner = FakeCompilerRunner("", exit_code=1, stderr="solc not found")

        outcome = compile_contract(
            "Foo.sol",
            project,
            settings=settings,
            runner=runner,
            downloader=FakeDownloader(),
        )

        assert outcome.kind == DiagnosticKind.NON_ZERO_EXIT
        assert outcome.messages == ["exit code 1: solc not found"]

    def test_malformed_output(self, project: ProjectConfig, settings: ZkBuildSettings) -> None:
        outcome = compile_contract(
            "Foo.sol",
            project,
            settings=settings,
            runner=FakeCompilerRunner("thread 'main' panicked"),
            downloader=FakeDownloader(),
        )

        assert outcome.kind == DiagnosticKind.MALFORMED_OUTPUT
        assert outcome.messages == ["thread 'main' panicked"]

    def test_missing_local_compiler(
        self, project: ProjectConfig, settings: ZkBuildSettings, tmp_path: Path
    ) -> None:
        runner = FakeCompilerRunner()

        outcome = compile_contract(
            "Foo.sol",
            project,
            version=str(tmp_path / "missing" / "zksolc"),
            settings=settings,
            runner=runner,
        )

        assert outcome.kind == DiagnosticKind.SPAWN_ERROR
        assert not runner.called

    def test_download_failure(self, project: ProjectConfig, settings: ZkBuildSettings) -> None:
        """An HTTP error status stops the build before compilation."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404, text="Not Found")

        client = httpx.Client(transport=httpx.MockTransport(handler))
        runner = FakeCompilerRunner()

        outcome = compile_contract(
            "Foo.sol",
            project,
            settings=settings,
            runner=runner,
            downloader=BinaryDownloader(platform=TEST_PLATFORM, client=client),
        )

        assert outcome.kind == DiagnosticKind.NETWORK_ERROR
        assert not runner.called
        assert not any(settings.compilers_dir.glob("zksolc-*"))

    def test_invalid_download_url(
        self, project: ProjectConfig, compilers_dir: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """A malformed mirror URL is reported, never raised."""
        monkeypatch.setattr(
            "zkbuild_core.manager.downloader.detect_platform", lambda: TEST_PLATFORM
        )
        runner = FakeCompilerRunner()

        outcome = compile_contract(
            "Foo.sol",
            project,
            settings=ZkBuildSettings(compilers_dir=compilers_dir, download_base_url="http://[::1"),
            runner=runner,
        )

        assert outcome.kind == DiagnosticKind.NETWORK_ERROR
        assert not runner.called
        assert not any(compilers_dir.glob("zksolc-*"))

    def test_unusable_compilers_dir(
        self, project: ProjectConfig, tmp_path: Path
    ) -> None:
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("")

        outcome = compile_contract(
            "Foo.sol",
            project,
            settings=ZkBuildSettings(compilers_dir=blocker),
            runner=FakeCompilerRunner(),
            downloader=FakeDownloader(),
        )

        assert outcome.kind == DiagnosticKind.CACHE_DIR_UNAVAILABLE
