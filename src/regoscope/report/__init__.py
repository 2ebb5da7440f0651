"""
Reporting module for regoscope.

Turns rule inventories and engine coverage into human-readable and
machine-readable output.

Output formats:
    - Console: Rich tables, one per policy, with coverage status icons
    - JSON: Structured documents for programmatic consumption

Example:
    from regoscope.report import generate_rules_json, print_rules

    rules = engine.get_rules()
    print_rules(rules)
    print(generate_rules_json(rules))
"""

from regoscope.report.console import print_rule_coverage, print_rules
from regoscope.report.coverage import classify, map_rule_coverage, rule_coverage
from regoscope.report.json import (
    build_coverage_dict,
    build_rules_dict,
    generate_coverage_json,
    generate_rules_json,
)

__all__ = [
    "print_rules",
    "print_rule_coverage",
    "classify",
    "map_rule_coverage",
    "rule_coverage",
    "build_rules_dict",
    "build_coverage_dict",
    "generate_rules_json",
    "generate_coverage_json",
]
