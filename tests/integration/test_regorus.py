"""
Integration tests against the real regorus engine.

Skipped when the regorus bindings are not installed.

Tests cover:
- Evaluating a policy with input and data
- Parse failures surfacing as ParseError with the source still scanned
"""

import pytest

regorus = pytest.importorskip("regorus")

from regoscope.engine import Engine  # noqa: E402
from regoscope.errors import JsonError, ParseError  # noqa: E402
from regoscope.schema import UNDEFINED  # noqa: E402


POLICY = """package authz

import rego.v1

# Deny unless a rule below allows
default allow := false

# Admins can do anything
allow if {
    data.roles[input.user] == "admin"
}
"""


@pytest.fixture
def real_engine():
    """An engine over a fresh regorus instance."""
    with Engine() as engine:
        yield engine


class TestRegorusEngine:
    """End-to-end evaluation through regorus."""

    def test_evaluate(self, real_engine: Engine) -> None:
        """Input and data drive the decision."""
        package = real_engine.add_policy("authz.rego", POLICY)
        real_engine.add_data({"roles": {"alice": "admin", "bob": "viewer"}})

        real_engine.set_input({"user": "alice"})
        assert real_engine.eval_query("data.authz.allow") is True

        real_engine.set_input({"user": "bob"})
        assert real_engine.eval_query("data.authz.allow") is False

        assert "authz" in package
        assert any("authz" in p for p in real_engine.get_packages())

    def test_undefined(self, real_engine: Engine) -> None:
        """Rules that do not exist are undefined."""
        real_engine.add_policy("authz.rego", POLICY)
        assert real_engine.eval_query("data.authz.missing") is UNDEFINED

    def test_rules(self, real_engine: Engine) -> None:
        """Rules of loaded policies are listed with descriptions."""
        real_engine.add_policy("authz.rego", POLICY)
        rules = real_engine.get_rules()["authz.rego"]
        assert [(r.name, r.description, r.start_line, r.end_line) for r in rules] == [
            ("allow", "Deny unless a rule below allows", 6, 6),
            ("allow", "Admins can do anything", 9, 11),
        ]

    def test_parse_error(self, real_engine: Engine) -> None:
        """Invalid policies raise ParseError and are still scanned."""
        with pytest.raises(ParseError):
            real_engine.add_policy("broken.rego", "package broken\n\nallow if {\n")
        assert [r.name for r in real_engine.get_rules()["broken.rego"]] == ["allow"]

    def test_invalid_input(self, real_engine: Engine) -> None:
        """Invalid JSON input is rejected before reaching regorus."""
        with pytest.raises(JsonError):
            real_engine.set_input_json("{")
