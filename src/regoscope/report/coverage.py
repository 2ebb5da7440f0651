"""
Rule coverage mapping.

The evaluation engine reports coverage per policy file as two line sets.
This module folds those lines onto the rule inventory so coverage can be
shown per rule: a line belongs to a rule when it falls inside the rule's
[start_line, end_line] range.
"""

from collections.abc import Mapping

from regoscope.schema import (
    CoverageReport,
    CoverageStatus,
    FileCoverage,
    RuleCoverage,
    RuleRecord,
)


def classify(covered: frozenset[int], not_covered: frozenset[int]) -> CoverageStatus:
    """Summarize a rule's covered and not-covered lines."""
    if not covered and not not_covered:
        return CoverageStatus.NO_DATA
    if not not_covered:
        return CoverageStatus.COVERED
    if not covered:
        return CoverageStatus.NOT_COVERED
    return CoverageStatus.PARTIAL


def rule_coverage(rule: RuleRecord, file_coverage: FileCoverage | None) -> RuleCoverage:
    """Coverage lines of one file restricted to one rule."""
    if file_coverage is None:
        return RuleCoverage(rule=rule)

    covered = frozenset(n for n in file_coverage.covered if rule.contains_line(n))
    not_covered = frozenset(n for n in file_coverage.not_covered if rule.contains_line(n))
    return RuleCoverage(
        rule=rule,
        covered=covered,
        not_covered=not_covered,
        status=classify(covered, not_covered),
    )


def map_rule_coverage(
    rules_by_policy: Mapping[str, list[RuleRecord]],
    report: CoverageReport,
) -> dict[str, list[RuleCoverage]]:
    """
    Map a coverage report onto rule inventories.

    Policies the report does not mention get NO_DATA for every rule.

    Args:
        rules_by_policy: Policy name to rules, as from Engine.get_rules()
        report: Coverage report from the engine

    Returns:
        Policy name to per-rule coverage, rules in source order
    """
    return {
        policy: [rule_coverage(rule, report.files.get(policy)) for rule in rules]
        for policy, rules in rules_by_policy.items()
    }
