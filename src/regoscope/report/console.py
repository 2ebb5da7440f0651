"""
Console report generator for regoscope.

Renders rule inventories and per-rule coverage as Rich tables, one table per
policy, policies in name order.
"""

from collections.abc import Mapping

from rich.console import Console
from rich.table import Table
from rich.text import Text

from regoscope.schema import CoverageStatus, RuleCoverage, RuleRecord


# Status icons
ICON_COVERED = "[green]✓[/green]"
ICON_PARTIAL = "[yellow]◐[/yellow]"
ICON_NOT_COVERED = "[red]✗[/red]"
ICON_NO_DATA = "[dim]○[/dim]"

STATUS_ICONS = {
    CoverageStatus.COVERED: ICON_COVERED,
    CoverageStatus.PARTIAL: ICON_PARTIAL,
    CoverageStatus.NOT_COVERED: ICON_NOT_COVERED,
    CoverageStatus.NO_DATA: ICON_NO_DATA,
}


def print_rules(
    rules_by_policy: Mapping[str, list[RuleRecord]],
    console: Console | None = None,
) -> None:
    """
    Print the rule inventory of each policy.

    Args:
        rules_by_policy: Policy name to rules
        console: Rich Console instance (creates one if not provided)
    """
    if console is None:
        console = Console()

    if not rules_by_policy:
        console.print("[dim]No policies loaded.[/dim]")
        return

    for policy in sorted(rules_by_policy):
        rules = rules_by_policy[policy]
        table = Table(title=policy, title_justify="left")
        table.add_column("Rule", style="cyan")
        table.add_column("Lines", justify="right")
        table.add_column("Description")

        for rule in rules:
            table.add_row(
                rule.name,
                _format_lines(rule),
                rule.description or Text("-", style="dim"),
            )

        if not rules:
            console.print(f"[bold]{policy}[/bold] [dim](no rules)[/dim]")
        else:
            console.print(table)
        console.print()

    total = sum(len(rules) for rules in rules_by_policy.values())
    console.print(f"[dim]{total} rules in {len(rules_by_policy)} policies[/dim]")


def print_rule_coverage(
    coverage_by_policy: Mapping[str, list[RuleCoverage]],
    console: Console | None = None,
) -> None:
    """
    Print per-rule coverage for each policy.

    Args:
        coverage_by_policy: Policy name to per-rule coverage
        console: Rich Console instance (creates one if not provided)
    """
    if console is None:
        console = Console()

    if not coverage_by_policy:
        console.print("[dim]No policies loaded.[/dim]")
        return

    counts = {status: 0 for status in CoverageStatus}

    for policy in sorted(coverage_by_policy):
        table = Table(title=policy, title_justify="left")
        table.add_column("", width=2)
        table.add_column("Rule", style="cyan")
        table.add_column("Lines", justify="right")
        table.add_column("Covered", justify="right", style="green")
        table.add_column("Not covered", justify="right", style="red")

        for entry in coverage_by_policy[policy]:
            counts[entry.status] += 1
            table.add_row(
                STATUS_ICONS[entry.status],
                entry.rule.name,
                _format_lines(entry.rule),
                str(len(entry.covered)),
                str(len(entry.not_covered)),
            )

        console.print(table)
        console.print()

    console.print(
        f"{ICON_COVERED} {counts[CoverageStatus.COVERED]} covered  "
        f"{ICON_PARTIAL} {counts[CoverageStatus.PARTIAL]} partial  "
        f"{ICON_NOT_COVERED} {counts[CoverageStatus.NOT_COVERED]} not covered  "
        f"{ICON_NO_DATA} {counts[CoverageStatus.NO_DATA]} no data"
    )


def _format_lines(rule: RuleRecord) -> str:
    if rule.start_line == rule.end_line:
        return str(rule.start_line)
    return f"{rule.start_line}-{rule.end_line}"
