"""Shared test fixtures for zkbuild packages.

Exports:
    zksolc doubles:
        FakeCompilerRunner: CompilerRunner returning canned output
        FakeDownloader: CompilerDownloader writing a small executable
        FailingDownloader: CompilerDownloader that must never be called
        write_fake_zksolc: Executable shell script mimicking zksolc

    zksolc output documents:
        zksolc_output: Standard-JSON output with the given contracts
        diagnostic: One entry of the output's errors list
        FOO_SOL / BAR_SOL: Sample Solidity sources
"""

from __future__ import annotations

from testing.fixtures.zksolc import (
    BAR_SOL,
    FOO_ABI,
    FOO_SOL,
    TEST_PLATFORM,
    FailingDownloader,
    FakeCompilerRunner,
    FakeDownloader,
    contract_output,
    diagnostic,
    write_fake_zksolc,
    write_project,
    zksolc_output,
)

__all__ = [
    "BAR_SOL",
    "FOO_ABI",
    "FOO_SOL",
    "TEST_PLATFORM",
    "FailingDownloader",
    "FakeCompilerRunner",
    "FakeDownloader",
    "contract_output",
    "diagnostic",
    "write_fake_zksolc",
    "write_project",
    "zksolc_output",
]
