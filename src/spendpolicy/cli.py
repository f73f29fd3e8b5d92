"""
CLI entry point for spendpolicy.

This module provides the Typer-based command-line interface. It loads a
policy file, hands the candidates to the resolver and renders the result.

Commands:
    resolve     Show which policy governs a user/category and why
    check       Resolve, then check an amount against the winning policy
    list        List every policy in a file with its declared scope

Exit codes:
    0   Success (for check: the amount is allowed)
    1   check only: the amount is denied
    2   The policy file could not be loaded or the arguments were invalid
"""

import json
import logging
import traceback
from pathlib import Path
from typing import Annotated, NoReturn, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.text import Text

from spendpolicy import __version__
from spendpolicy.errors import SpendPolicyError
from spendpolicy.log import configure_logging
from spendpolicy.report import (
    build_resolution_dict,
    render_resolution,
    serialize_policy,
)
from spendpolicy.resolver import PolicyResolver
from spendpolicy.schema import PolicySet, SpendPolicy, load_policy_set

app = typer.Typer(
    name="spendpolicy",
    help="Resolve which spend policy governs a user and category.",
    add_completion=False,
    no_args_is_help=True,
)

console = Console()
logger = logging.getLogger(__name__)

EXIT_DENIED = 1
EXIT_ERROR = 2

PolicyFileArg = Annotated[
    Path,
    typer.Argument(
        help="Path to the policy YAML file.",
        exists=True,
        readable=True,
        dir_okay=False,
        resolve_path=True,
    ),
]
UserOpt = Annotated[
    str,
    typer.Option("--user", "-u", help="User to resolve the policy for."),
]
CategoryOpt = Annotated[
    Optional[str],
    typer.Option("--category", "-c", help="Expense category, if known."),
]
JsonOpt = Annotated[
    bool,
    typer.Option("--json", help="Output results in JSON format."),
]
VerboseOpt = Annotated[
    bool,
    typer.Option("--verbose", help="Enable verbose output."),
]
DebugOpt = Annotated[
    bool,
    typer.Option("--debug", help="Enable debug logging and full error tracebacks."),
]


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold]spendpolicy[/bold] version {__version__}")
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
    spendpolicy - Scoped spend policy resolution.

    Picks the single policy that governs a spend decision for a user and
    category, and explains why it beat the alternatives.
    """
    pass


@app.command()
def resolve(
    policy_file: PolicyFileArg,
    user: UserOpt,
    category: CategoryOpt = None,
    json_output: JsonOpt = False,
    verbose: VerboseOpt = False,
    debug: DebugOpt = False,
) -> None:
    """
    Show which policy governs a user and category.

    Example:
        $ spendpolicy resolve policies.yaml --user alice --category travel
    """
    configure_logging(verbose=verbose, debug=debug)
    policy_set = _load(policy_file, json_output, debug)

    try:
        result = PolicyResolver.from_policy_set(policy_set).resolve(user, category)
    except SpendPolicyError as e:
        _fail("invalid_query", e, json_output, debug)

    if json_output:
        print(json.dumps(build_resolution_dict(result), indent=2))
    else:
        render_resolution(result, console=console)


@app.command()
def check(
    policy_file: PolicyFileArg,
    amount: Annotated[
        str,
        typer.Argument(help="Spend amount, e.g. 120 or 99.95."),
    ],
    user: UserOpt,
    category: CategoryOpt = None,
    json_output: JsonOpt = False,
    verbose: VerboseOpt = False,
    debug: DebugOpt = False,
) -> None:
    """
    Check an amount against the policy that governs a user and category.

    Exits 0 when the amount is allowed and 1 when it is denied.

    Example:
        $ spendpolicy check policies.yaml 250 --user alice --category travel
    """
    configure_logging(verbose=verbose, debug=debug)
    policy_set = _load(policy_file, json_output, debug)

    try:
        evaluation = PolicyResolver.from_policy_set(policy_set).evaluate(
            amount, user, category
        )
    except SpendPolicyError as e:
        _fail("invalid_query", e, json_output, debug)

    logger.info(
        "Limit check for user=%s category=%s amount=%s: %s",
        user,
        category,
        amount,
        "allowed" if evaluation.allowed else "denied",
    )

    if json_output:
        report = build_resolution_dict(evaluation.resolution, evaluation.limit_check)
        print(json.dumps(report, indent=2))
    else:
        render_resolution(
            evaluation.resolution,
            console=console,
            limit_check=evaluation.limit_check,
        )

    if not evaluation.allowed:
        raise typer.Exit(code=EXIT_DENIED)


@app.command("list")
def list_policies(
    policy_file: PolicyFileArg,
    json_output: JsonOpt = False,
    verbose: VerboseOpt = False,
    debug: DebugOpt = False,
) -> None:
    """
    List every policy in a file with its declared scope.

    Policies are ordered by user, then category; unscoped entries come last
    within each group.

    Example:
        $ spendpolicy list policies.yaml
    """
    configure_logging(verbose=verbose, debug=debug)
    policy_set = _load(policy_file, json_output, debug)
    policies = sorted(policy_set.policies, key=_listing_key)

    if json_output:
        output = {
            "org_id": policy_set.org_id,
            "name": policy_set.name,
            "policies": [
                {"scope": p.scope_label, **serialize_policy(p)} for p in policies
            ],
        }
        print(json.dumps(output, indent=2))
        return

    if not policies:
        console.print("[dim]No policies found.[/dim]")
        return

    title = policy_set.name or policy_set.org_id
    if title is not None:
        title = escape(title)
    table = Table(show_header=True, header_style="bold", title=title)
    table.add_column("Policy", style="cyan", no_wrap=True)
    table.add_column("Scope", no_wrap=True)
    table.add_column("User", no_wrap=True)
    table.add_column("Category", no_wrap=True)
    table.add_column("Max", justify="right", no_wrap=True)
    table.add_column("Review", no_wrap=True)

    for p in policies:
        table.add_row(
            Text(p.id),
            p.scope_label,
            Text(p.user_id) if p.user_id else "[dim]all[/dim]",
            Text(p.category_id) if p.category_id else "[dim]all[/dim]",
            str(p.max_amount),
            p.review_mode.value,
        )

    console.print(table)


def _listing_key(policy: SpendPolicy) -> tuple[bool, str, bool, str]:
    """Sort by user then category, None after any value."""
    return (
        policy.user_id is None,
        policy.user_id or "",
        policy.category_id is None,
        policy.category_id or "",
    )


def _load(policy_file: Path, json_output: bool, debug: bool) -> PolicySet:
    """Load a policy file or exit with EXIT_ERROR."""
    try:
        policy_set = load_policy_set(policy_file)
    except Exception as e:
        _fail("policy_load_error", e, json_output, debug)

    logger.info(
        "Loaded %d policies from %s", len(policy_set.policies), policy_file
    )
    return policy_set


def _fail(error_type: str, error: Exception, json_output: bool, debug: bool) -> NoReturn:
    """Report an error in the selected format and exit with EXIT_ERROR."""
    if json_output:
        _output_json_error(error_type, error, debug)
    else:
        console.print(f"[red]Error: {escape(str(error))}[/red]")
        if debug:
            console.print(f"[dim]{escape(traceback.format_exc())}[/dim]")
    raise typer.Exit(code=EXIT_ERROR)


def _output_json_error(
    error_type: str,
    error: Exception,
    include_traceback: bool = False,
) -> None:
    """Output an error in JSON format."""
    output = {
        "error": True,
        "error_type": error_type,
        "message": str(error),
    }
    if isinstance(error, SpendPolicyError):
        output["details"] = error.to_dict()
    if include_traceback:
        output["traceback"] = traceback.format_exc()
    print(json.dumps(output, indent=2, default=str))


if __name__ == "__main__":
    app()
