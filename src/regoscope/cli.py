"""
CLI entry point for regoscope.

This module provides the Typer-based command-line interface for regoscope.

Commands:
    rules       List the rules defined in policy files (no engine needed)
    eval        Evaluate a query against policies, data and input
    packages    List the packages of loaded policies
    coverage    Evaluate a query with coverage and show per-rule coverage
    doctor      Check the environment and the engine backend

Architecture Note:
    The CLI is intentionally thin - it parses arguments and delegates to
    Engine and the report module, so everything here is also available
    programmatically.
"""

import json
import sys
import traceback
from pathlib import Path
from typing import Annotated, Any, NoReturn, Optional

import typer
import yaml
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

from regoscope import __version__
from regoscope.engine import Engine
from regoscope.errors import BackendUnavailableError, ConfigError, RegoscopeError
from regoscope.report import (
    generate_coverage_json,
    generate_rules_json,
    print_rule_coverage,
    print_rules,
)
from regoscope.scanner import extract_all
from regoscope.schema import UNDEFINED, load_config
from regoscope.utils.logging import get_logger, setup_logging

logger = get_logger(__name__)

app = typer.Typer(
    name="regoscope",
    help="Evaluate Rego policies and inventory their rules.",
    add_completion=False,
    no_args_is_help=True,
)

# Rich console for formatted output
console = Console()


# =============================================================================
# Shared Options
# =============================================================================

PolicyOption = Annotated[
    Optional[list[Path]],
    typer.Option(
        "--policy",
        "-p",
        help="Rego policy file to load (repeatable).",
        exists=True,
        readable=True,
        dir_okay=False,
    ),
]
DataOption = Annotated[
    Optional[list[Path]],
    typer.Option(
        "--data",
        "-d",
        help="JSON data document to add (repeatable).",
        exists=True,
        readable=True,
        dir_okay=False,
    ),
]
InputOption = Annotated[
    Optional[Path],
    typer.Option(
        "--input",
        "-i",
        help="JSON input document.",
        exists=True,
        readable=True,
        dir_okay=False,
    ),
]
ConfigOption = Annotated[
    Optional[Path],
    typer.Option(
        "--config",
        "-c",
        help="Workspace config YAML (policies, data, input, coverage).",
        exists=True,
        readable=True,
        dir_okay=False,
    ),
]
JsonOption = Annotated[
    bool,
    typer.Option(
        "--json",
        help="Output results in JSON format.",
    ),
]
VerboseOption = Annotated[
    bool,
    typer.Option(
        "--verbose",
        help="Enable debug logging on stderr.",
    ),
]
DebugOption = Annotated[
    bool,
    typer.Option(
        "--debug",
        help="Show full error tracebacks.",
    ),
]


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold]regoscope[/bold] version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        Optional[bool],
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """
    regoscope - Rego policy evaluation with rule inventories.
    """
    pass


# =============================================================================
# Commands
# =============================================================================


@app.command()
def rules(
    files: Annotated[
        list[Path],
        typer.Argument(
            help="Rego policy files to scan.",
            exists=True,
            readable=True,
            dir_okay=False,
        ),
    ],
    json_output: JsonOption = False,
    verbose: VerboseOption = False,
) -> None:
    """
    List the rules defined in policy files.

    Scans the source text directly; the evaluation engine is not needed and
    files that do not parse are still scanned.

    Example:
        $ regoscope rules policies/authz.rego --json
    """
    setup_logging(verbose=verbose)

    policies = {_policy_name(path): path.read_text() for path in files}
    rules_by_policy = extract_all(policies)

    if json_output:
        print(generate_rules_json(rules_by_policy))
    else:
        print_rules(rules_by_policy, console)


@app.command("eval")
def eval_command(
    query: Annotated[
        str,
        typer.Argument(help="Rego query, e.g. data.authz.allow"),
    ],
    policy: PolicyOption = None,
    data: DataOption = None,
    input_path: InputOption = None,
    config: ConfigOption = None,
    json_output: JsonOption = False,
    verbose: VerboseOption = False,
    debug: DebugOption = False,
) -> None:
    """
    Evaluate a query.

    Prints the value of the query, or "undefined" when it has none.

    Example:
        $ regoscope eval data.authz.allow -p authz.rego -i input.json
    """
    setup_logging(verbose=verbose)

    try:
        with _load_engine(policy, data, input_path, config) as engine:
            value = engine.eval_query(query)
    except RegoscopeError as e:
        _fail(e.error_type, e.message, json_output, debug)

    if json_output:
        output = {
            "query": query,
            "undefined": value is UNDEFINED,
            "value": None if value is UNDEFINED else value,
        }
        print(json.dumps(output, indent=2))
    elif value is UNDEFINED:
        console.print("[dim]undefined[/dim]")
    else:
        console.print_json(data=value)


@app.command()
def packages(
    policy: PolicyOption = None,
    config: ConfigOption = None,
    json_output: JsonOption = False,
    verbose: VerboseOption = False,
    debug: DebugOption = False,
) -> None:
    """
    List the packages of loaded policies.

    Example:
        $ regoscope packages -p authz.rego -p rbac.rego
    """
    setup_logging(verbose=verbose)

    try:
        with _load_engine(policy, None, None, config) as engine:
            names = engine.get_packages()
    except RegoscopeError as e:
        _fail(e.error_type, e.message, json_output, debug)

    if json_output:
        print(json.dumps({"packages": names}, indent=2))
    elif not names:
        console.print("[dim]No packages loaded.[/dim]")
    else:
        for name in names:
            console.print(f"[cyan]{name}[/cyan]")


@app.command()
def coverage(
    query: Annotated[
        str,
        typer.Argument(help="Rego query to evaluate with coverage enabled."),
    ],
    policy: PolicyOption = None,
    data: DataOption = None,
    input_path: InputOption = None,
    config: ConfigOption = None,
    json_output: JsonOption = False,
    verbose: VerboseOption = False,
    debug: DebugOption = False,
) -> None:
    """
    Evaluate a query and show which rules it exercised.

    Engine coverage lines are mapped onto each rule's line range.

    Example:
        $ regoscope coverage data.authz.allow -p authz.rego -i input.json
    """
    setup_logging(verbose=verbose)

    try:
        with _load_engine(policy, data, input_path, config) as engine:
            engine.enable_coverage(True)
            engine.eval_query(query)
            coverage_by_policy = engine.get_rule_coverage()
    except RegoscopeError as e:
        _fail(e.error_type, e.message, json_output, debug)

    if json_output:
        print(generate_coverage_json(coverage_by_policy))
    else:
        print_rule_coverage(coverage_by_policy, console)


@app.command()
def doctor(
    json_output: JsonOption = False,
) -> None:
    """
    Check the environment and the engine backend.

    Verifies:
    - Python version (3.11+)
    - The regorus engine bindings can be loaded

    Example:
        $ regoscope doctor
    """
    checks = []

    py_version = sys.version_info
    py_ok = py_version >= (3, 11)
    checks.append({
        "name": "Python version",
        "ok": py_ok,
        "value": f"{py_version.major}.{py_version.minor}.{py_version.micro}",
        "message": "OK" if py_ok else "Requires Python 3.11+",
    })

    try:
        engine = Engine()
        engine.close()
        checks.append({
            "name": "Engine backend",
            "ok": True,
            "value": "regorus",
            "message": "OK",
        })
    except BackendUnavailableError as e:
        checks.append({
            "name": "Engine backend",
            "ok": False,
            "value": e.backend,
            "message": e.suggestion or e.message,
        })

    all_ok = all(check["ok"] for check in checks)

    if json_output:
        print(json.dumps({"ok": all_ok, "version": __version__, "checks": checks}, indent=2))
    else:
        console.print(f"[bold]regoscope doctor[/bold] v{__version__}")
        console.print()
        for check in checks:
            icon = "[green]✓[/green]" if check["ok"] else "[red]✗[/red]"
            console.print(f"{icon} {check['name']}: [dim]{check['value']}[/dim] - {check['message']}")
        console.print()
        if all_ok:
            console.print("[green]All checks passed![/green]")
        else:
            console.print("[yellow]Some checks failed. See above for details.[/yellow]")

    raise typer.Exit(code=0 if all_ok else 1)


# =============================================================================
# Helpers
# =============================================================================


def _policy_name(path: Path) -> str:
    return path.as_posix()


def _load_engine(
    policies: list[Path] | None,
    data: list[Path] | None,
    input_path: Path | None,
    config: Path | None,
) -> Engine:
    """Build an engine from a config file and/or explicit files."""
    if config is not None:
        try:
            scope_config = load_config(config)
        except (ValidationError, yaml.YAMLError) as e:
            raise ConfigError(message=f"Invalid config {config}: {e}", path=str(config)) from e
        engine = Engine.from_config(scope_config, base_dir=config.parent)
    else:
        engine = Engine()

    try:
        for path in policies or []:
            engine.add_policy(_policy_name(path), path.read_text())
        for path in data or []:
            engine.add_data_json(path.read_text())
        if input_path is not None:
            engine.set_input_json(input_path.read_text())
    except RegoscopeError:
        engine.close()
        raise

    logger.debug("Loaded engine: %r", engine)
    return engine


def _fail(error_type: str, message: str, json_output: bool, debug: bool) -> NoReturn:
    """Report an error and exit with status 1."""
    if json_output:
        output: dict[str, Any] = {
            "error": True,
            "error_type": error_type,
            "message": message,
        }
        if debug:
            output["traceback"] = traceback.format_exc()
        print(json.dumps(output, indent=2))
    else:
        console.print(f"[red]{error_type}: {escape(message)}[/red]")
        if debug:
            console.print(f"[dim]{escape(traceback.format_exc())}[/dim]")
    raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
