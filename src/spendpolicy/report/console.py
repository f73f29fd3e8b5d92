"""
Console report for spendpolicy.

Renders a resolution trace with Rich: the query, every applicable policy in
precedence order with the winner marked, the selection reason, and the limit
check outcome when one was made.
"""

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from spendpolicy.schema import LimitCheck, ResolutionResult, ReviewMode


ICON_SELECTED = "[green]✓[/green]"
ICON_SHADOWED = "[dim]○[/dim]"
ICON_ALLOWED = "[green]✓[/green]"
ICON_DENIED = "[red]✗[/red]"


def render_resolution(
    result: ResolutionResult,
    console: Console | None = None,
    limit_check: LimitCheck | None = None,
) -> None:
    """
    Print a resolution trace to the console.

    Args:
        result: The resolution to render
        console: Rich Console instance (creates one if not provided)
        limit_check: Optional limit check made against the winner
    """
    if console is None:
        console = Console()

    _print_header(console, result)
    console.print()

    if result.applicable_policies:
        _print_trace(console, result)
        console.print()

    console.print(f"[bold]Outcome:[/bold] {escape(result.selection_reason)}")

    if limit_check is not None:
        icon = ICON_ALLOWED if limit_check.allowed else ICON_DENIED
        style = "green" if limit_check.allowed else "red"
        verdict = "ALLOWED" if limit_check.allowed else "DENIED"
        console.print(
            f"[bold]Limit:[/bold] {icon} [{style}]{verdict}[/{style}] "
            f"{escape(limit_check.reason)}"
        )


def _print_header(console: Console, result: ResolutionResult) -> None:
    header = Text()
    header.append(" User ", style="bold")
    header.append(result.user_id, style="bold cyan")
    header.append(" │ ", style="dim")
    header.append("Category ", style="bold")
    if result.category_id is not None:
        header.append(result.category_id, style="bold cyan")
    else:
        header.append("(any)", style="dim")
    console.print(Panel(header, expand=False))


def _print_trace(console: Console, result: ResolutionResult) -> None:
    table = Table(show_header=True, header_style="bold", expand=True)
    table.add_column("#", style="dim", width=3, justify="right")
    table.add_column("", width=2, justify="center")
    table.add_column("Scope", style="cyan", no_wrap=True)
    table.add_column("Policy", no_wrap=True)
    table.add_column("Max", justify="right", no_wrap=True)
    table.add_column("Review", no_wrap=True)
    table.add_column("Reason", overflow="fold")

    for rank, entry in enumerate(result.applicable_policies, start=1):
        policy = entry.policy
        review = (
            "auto-approve"
            if policy.review_mode == ReviewMode.AUTO_APPROVE
            else "manual"
        )
        table.add_row(
            str(rank),
            ICON_SELECTED if rank == 1 else ICON_SHADOWED,
            entry.scope.value,
            Text(policy.id),
            str(policy.max_amount),
            review,
            Text(entry.reason),
        )

    console.print(table)
