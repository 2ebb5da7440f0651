"""
Integration tests for the report module.

Tests cover:
- JSON rule inventory and coverage reports
- Console rendering of both reports
"""

import json
from io import StringIO

import pytest
from rich.console import Console

from regoscope import __version__
from regoscope.engine import Engine
from regoscope.report import (
    build_coverage_dict,
    build_rules_dict,
    generate_coverage_json,
    generate_rules_json,
    print_rule_coverage,
    print_rules,
)


@pytest.fixture
def loaded_engine(engine: Engine, fake_backend, authz_rego: str) -> Engine:
    """An engine with two policies and some coverage."""
    engine.add_policy("authz.rego", authz_rego)
    engine.add_policy("empty.rego", "package empty\n")
    fake_backend.coverage_report = {
        "files": [
            {"path": "authz.rego", "covered": [10, 13, 19], "not_covered": [14, 20]},
        ]
    }
    return engine


def _render(func, data) -> str:
    output = StringIO()
    func(data, Console(file=output, force_terminal=False, width=120))
    return output.getvalue()


class TestJsonReport:
    """Tests for JSON report generation."""

    def test_rules_report(self, loaded_engine: Engine) -> None:
        """Rule inventories use the name/description/line shape."""
        report = json.loads(generate_rules_json(loaded_engine.get_rules()))

        assert report["report_version"] == "1.0"
        assert report["regoscope_version"] == __version__
        assert "generated_at" in report
        assert list(report["policies"]) == ["authz.rego", "empty.rego"]
        assert report["policies"]["empty.rego"] == []
        assert report["policies"]["authz.rego"][0] == {
            "name": "allow",
            "description": "Deny unless a rule below allows",
            "start_line": 10,
            "end_line": 10,
        }

    def test_rules_policies_sorted(self) -> None:
        """Policies are emitted in name order."""
        report = build_rules_dict({"z.rego": [], "a.rego": []})
        assert list(report["policies"]) == ["a.rego", "z.rego"]

    def test_coverage_report(self, loaded_engine: Engine) -> None:
        """Coverage entries carry status and line lists."""
        report = json.loads(generate_coverage_json(loaded_engine.get_rule_coverage()))

        entries = report["policies"]["authz.rego"]
        assert [e["status"] for e in entries] == [
            "covered",
            "partial",
            "partial",
            "no_data",
            "no_data",
        ]
        assert entries[1]["covered"] == [13]
        assert entries[1]["not_covered"] == [14]
        assert report["summary"] == {"covered": 1, "partial": 2, "no_data": 2}

    def test_coverage_summary_empty(self) -> None:
        """No rules, empty summary."""
        assert build_coverage_dict({})["summary"] == {}

    def test_indent(self, loaded_engine: Engine) -> None:
        """Indentation is configurable."""
        text = generate_rules_json(loaded_engine.get_rules(), indent=4)
        assert '\n    "report_version"' in text


class TestConsoleReport:
    """Tests for console report generation."""

    def test_print_rules(self, loaded_engine: Engine) -> None:
        """Each policy and rule is shown."""
        text = _render(print_rules, loaded_engine.get_rules())

        assert "authz.rego" in text
        assert "Admins can do anything" in text
        assert "13-16" in text
        assert "empty.rego" in text
        assert "(no rules)" in text
        assert "5 rules in 2 policies" in text

    def test_print_rules_empty(self) -> None:
        """Nothing loaded is reported."""
        assert "No policies loaded." in _render(print_rules, {})

    def test_print_rule_coverage(self, loaded_engine: Engine) -> None:
        """Coverage tables end with a status summary."""
        text = _render(print_rule_coverage, loaded_engine.get_rule_coverage())

        assert "is_admin" in text
        assert "1 covered" in text
        assert "2 partial" in text
        assert "0 not covered" in text
        assert "2 no data" in text

    def test_print_rule_coverage_empty(self) -> None:
        """Nothing loaded is reported."""
        assert "No policies loaded." in _render(print_rule_coverage, {})
