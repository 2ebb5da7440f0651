"""
JSON report generator for regoscope.

Generates structured JSON for programmatic consumption: rule inventories in
the ``{name, description, start_line, end_line}`` shape and per-rule coverage.
Policies are emitted in name order so output is stable between runs.
"""

import json
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

from regoscope import __version__
from regoscope.schema import RuleCoverage, RuleRecord

REPORT_VERSION = "1.0"


def build_rules_dict(rules_by_policy: Mapping[str, list[RuleRecord]]) -> dict[str, Any]:
    """
    Build a report dictionary for rule inventories.

    Args:
        rules_by_policy: Policy name to rules

    Returns:
        Dictionary with report metadata and a ``policies`` mapping
    """
    return {
        **_header(),
        "policies": {
            policy: [rule.to_dict() for rule in rules_by_policy[policy]]
            for policy in sorted(rules_by_policy)
        },
    }


def build_coverage_dict(
    coverage_by_policy: Mapping[str, list[RuleCoverage]],
) -> dict[str, Any]:
    """
    Build a report dictionary for per-rule coverage.

    Args:
        coverage_by_policy: Policy name to per-rule coverage

    Returns:
        Dictionary with report metadata, a ``policies`` mapping and a summary
    """
    summary: dict[str, int] = {}
    for entries in coverage_by_policy.values():
        for entry in entries:
            summary[entry.status.value] = summary.get(entry.status.value, 0) + 1

    return {
        **_header(),
        "policies": {
            policy: [entry.to_dict() for entry in coverage_by_policy[policy]]
            for policy in sorted(coverage_by_policy)
        },
        "summary": summary,
    }


def generate_rules_json(
    rules_by_policy: Mapping[str, list[RuleRecord]],
    indent: int = 2,
) -> str:
    """Rule inventory report as a JSON string."""
    return json.dumps(build_rules_dict(rules_by_policy), indent=indent)


def generate_coverage_json(
    coverage_by_policy: Mapping[str, list[RuleCoverage]],
    indent: int = 2,
) -> str:
    """Per-rule coverage report as a JSON string."""
    return json.dumps(build_coverage_dict(coverage_by_policy), indent=indent)


def _header() -> dict[str, Any]:
    return {
        "report_version": REPORT_VERSION,
        "generated_at": datetime.now(UTC).isoformat(),
        "regoscope_version": __version__,
    }
