"""
Pytest configuration and fixtures for regoscope tests.

This module provides shared fixtures used across unit and integration
tests, including an in-memory backend that stands in for the native
evaluation engine.
"""

import logging
import tempfile
from pathlib import Path
from typing import Any, Generator

import pytest

from regoscope.backend import Backend
from regoscope.engine import Engine
from regoscope.utils.logging import PACKAGE_LOGGER


class FakeBackend(Backend):
    """
    Backend that records calls and returns canned results.

    Attributes:
        policies: Policy path to package path
        input_json: Last input document set
        data_json: Data documents added, in order
        coverage_enabled: Last coverage flag set
        results: Query to canned engine result document
        coverage_report: Canned coverage document
        failures: Method name to exception raised by that method
    """

    def __init__(self) -> None:
        self.policies: dict[str, str] = {}
        self.input_json: str | None = None
        self.data_json: list[str] = []
        self.coverage_enabled = False
        self.results: dict[str, dict[str, Any]] = {}
        self.coverage_report: dict[str, Any] = {"files": []}
        self.failures: dict[str, Exception] = {}

    @property
    def name(self) -> str:
        return "fake"

    def set_result(self, query: str, value: Any) -> None:
        """Make a query evaluate to a single value."""
        self.results[query] = {"result": [{"expressions": [{"value": value, "text": query}]}]}

    def _maybe_fail(self, method: str) -> None:
        if method in self.failures:
            raise self.failures[method]

    def add_policy(self, path: str, source: str) -> str:
        self._maybe_fail("add_policy")
        for line in source.splitlines():
            line = line.strip()
            if line.startswith("package "):
                package = "data." + line.split()[1]
                self.policies[path] = package
                return package
        raise RuntimeError(f"{path}: missing package declaration")

    def set_input_json(self, text: str) -> None:
        self._maybe_fail("set_input_json")
        self.input_json = text

    def add_data_json(self, text: str) -> None:
        self._maybe_fail("add_data_json")
        self.data_json.append(text)

    def eval_query(self, query: str) -> dict[str, Any]:
        self._maybe_fail("eval_query")
        return self.results.get(query, {"result": []})

    def get_packages(self) -> list[str]:
        self._maybe_fail("get_packages")
        return sorted(set(self.policies.values()))

    def clear_data(self) -> None:
        self._maybe_fail("clear_data")
        self.data_json.clear()

    def set_enable_coverage(self, enable: bool) -> None:
        self._maybe_fail("set_enable_coverage")
        self.coverage_enabled = enable

    def get_coverage_report(self) -> dict[str, Any]:
        self._maybe_fail("get_coverage_report")
        return self.coverage_report

    def clear_coverage_data(self) -> None:
        self._maybe_fail("clear_coverage_data")
        self.coverage_report = {"files": []}


@pytest.fixture(autouse=True)
def restore_package_logger() -> Generator[None, None, None]:
    """Put the package logger back after tests that configure it."""
    logger = logging.getLogger(PACKAGE_LOGGER)
    handlers, level, propagate = list(logger.handlers), logger.level, logger.propagate
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)
    logger.propagate = propagate


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def fake_backend() -> FakeBackend:
    """Return a fresh fake backend."""
    return FakeBackend()


@pytest.fixture
def engine(fake_backend: FakeBackend) -> Generator[Engine, None, None]:
    """Create an engine over the fake backend."""
    eng = Engine(backend=fake_backend, lock_timeout=1.0)
    yield eng
    eng.close()


@pytest.fixture
def authz_rego() -> str:
    """Return a realistic authorization policy."""
    return """package authz

import rego.v1

# =============================================================================
# Defaults
# =============================================================================

# Deny unless a rule below allows
default allow := false

# Public pages are readable by anyone
allow if {
    input.method == "GET"
    input.path == "/public"
}

# Admins can do anything
allow if {
    input.user.role == "admin"
}

# Collect reasons for denial
deny contains msg if {
    not allow
    msg := sprintf("denied: %s", [input.path])
}

is_admin := input.user.role == "admin"
"""
