"""Shared testing infrastructure for zkbuild.

This package provides reusable test doubles and canned compiler output
for testing across all zkbuild packages.

Modules:
    fixtures: Fake zksolc runners, downloaders and output documents

Usage:
    In your conftest.py or test module:
        from testing.fixtures.zksolc import FakeCompilerRunner, zksolc_output
"""

from __future__ import annotations
