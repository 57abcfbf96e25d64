"""Unit tests for zkbuild_core.compilation.interpreter."""

from __future__ import annotations

import json
from typing import Any

import pytest

from testing.fixtures.zksolc import FOO_ABI, diagnostic, zksolc_output
from zkbuild_core.compilation.interpreter import interpret
from zkbuild_core.compilation.models import OutcomeStatus, RawOutput
from zkbuild_core.errors import DiagnosticKind


def raw(document: dict[str, Any] | list[Any] | str) -> RawOutput:
    stdout = document if isinstance(document, str) else json.dumps(document)
    return RawOutput(stdout=stdout, stderr="", exit_code=0)


class TestSuccess:
    """Output without error diagnostics."""

    def test_artifacts_are_extracted(self) -> None:
        outcome = interpret(raw(zksolc_output({"src/Foo.sol": ["Foo"]})))

        assert outcome.status == OutcomeStatus.SUCCESS
        assert outcome.passed
        assert outcome.kind is None
        assert outcome.compiler_version == "1.3.9"
        [artifact] = outcome.artifacts
        assert artifact.name == "Foo"
        assert artifact.source == "src/Foo.sol"
        assert artifact.abi == FOO_ABI
        assert artifact.bytecode == "0x0000008003000039"
        assert artifact.bytecode_hash == "0100001b5a0a1d6d"
        assert artifact.method_identifiers == {"set(uint256)": "60fe47b1"}

    def test_artifacts_are_ordered(self) -> None:
        output = zksolc_output({"src/b/Bar.sol": ["Bar"], "src/Foo.sol": ["Zed", "Foo"]})

        outcome = interpret(raw(output))

        assert [(a.source, a.name) for a in outcome.artifacts] == [
            ("src/Foo.sol", "Foo"),
            ("src/Foo.sol", "Zed"),
            ("src/b/Bar.sol", "Bar"),
        ]

    def test_warnings_do_not_fail(self) -> None:
        """Warnings are kept as diagnostics on a successful outcome."""
        warning = diagnostic("Unused local variable.", severity="warning", error_type="Warning")
        output = zksolc_output({"src/Foo.sol": ["Foo"]}, errors=[warning])

        outcome = interpret(raw(output))

        assert outcome.passed
        assert len(outcome.warnings) == 1
        assert outcome.warnings[0].message == "Unused local variable."
        assert outcome.warnings[0].source_file == "src/Foo.sol"

    def test_unknown_fields_are_ignored(self) -> None:
        output = zksolc_output({"src/Foo.sol": ["Foo"]})
        output["contracts"]["src/Foo.sol"]["Foo"]["metadata"] = "{}"
        output["future_field"] = {"x": 1}

        assert interpret(raw(output)).passed

    def test_no_contracts(self) -> None:
        """An output with nothing compiled is a success with no artifacts."""
        outcome = interpret(raw({}))

        assert outcome.passed
        assert outcome.artifacts == []


class TestCompilerReportedErrors:
    """Output listing error diagnostics."""

    def test_error_fails_with_verbatim_message(self) -> None:
        formatted = "ParserError: Expected ';' but got '}'\n --> src/Foo.sol:7:5:\n  |\n7 |     }\n"
        error = diagnostic("Expected ';' but got '}'", formatted_message=formatted)

        outcome = interpret(raw(zksolc_output(errors=[error])))

        assert outcome.status == OutcomeStatus.FAILURE
        assert outcome.kind == DiagnosticKind.COMPILER_REPORTED_ERROR
        assert outcome.messages == [formatted]

    def test_message_used_without_formatted_message(self) -> None:
        output = zksolc_output(errors=[{"severity": "error", "message": "Stack too deep"}])

        outcome = interpret(raw(output))

        assert outcome.messages == ["Stack too deep"]

    def test_only_errors_become_messages(self) -> None:
        """Warnings stay in diagnostics but are not failure messages."""
        errors = [
            {"severity": "warning", "message": "shadowing"},
            {"severity": "error", "message": "first"},
            {"severity": "error", "message": "second"},
        ]

        outcome = interpret(raw(zksolc_output({"src/Foo.sol": ["Foo"]}, errors=errors)))

        assert outcome.failed
        assert outcome.messages == ["first", "second"]
        assert len(outcome.diagnostics) == 3
        assert outcome.artifacts == []

    def test_describe_uses_failure_headline(self) -> None:
        outcome = interpret(raw(zksolc_output(errors=[{"severity": "error", "message": "x"}])))

        assert outcome.describe() == "Failed to compile smart contracts with zksolc: x"


class TestMalformedOutput:
    """Output that cannot be understood."""

    @pytest.mark.parametrize(
        "stdout",
        [
            "Error: unexpected argument",
            "[1, 2, 3]",
            '{"errors": "oops"}',
            '{"contracts": {"src/Foo.sol": {"Foo": {"abi": "not a list"}}}}',
            '{"errors": [{"message": "no severity"}]}',
        ],
    )
    def test_malformed_output(self, stdout: str) -> None:
        """Non-JSON or non-conforming output keeps the raw text."""
        outcome = interpret(raw(stdout))

        assert outcome.failed
        assert outcome.kind == DiagnosticKind.MALFORMED_OUTPUT
        assert outcome.messages == [stdout]

    def test_empty_output(self) -> None:
        outcome = interpret(RawOutput(stdout="  \n", stderr="", exit_code=0))

        assert outcome.kind == DiagnosticKind.MALFORMED_OUTPUT
        assert outcome.messages == ["  \n"]
