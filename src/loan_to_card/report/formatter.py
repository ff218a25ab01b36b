"""Rich console output for strategies, confirmations and run results."""

from __future__ import annotations

from decimal import Decimal

from rich.columns import Columns
from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..domain import StrategyListing
from ..errors import PipelineFailure
from ..pipeline.events import PipelineOutcome
from .summary import ConfirmationSummary


def _truncate_address(address: str) -> str:
    return f"{address[:10]}...{address[-4:]}"


def _format_amount(value: Decimal, places: int = 6) -> str:
    text = f"{value:.{places}f}".rstrip("0").rstrip(".")
    return text or "0"


def _key_value_table(style: str) -> Table:
    table = Table(show_header=False, box=None, padding=(0, 1))
    table.add_column("Key", style="dim")
    table.add_column("Value", style=style)
    return table


def render_strategies(listing: StrategyListing, console: Console | None = None) -> None:
    console = console or Console()
    if not listing.ready:
        console.print(f"[red]Failed to load strategies:[/] {listing.error}")
        return
    if not listing.strategies:
        console.print("[yellow]No strategies available.[/]")
        return

    table = Table(expand=True)
    table.add_column("Strategy", style="cyan", no_wrap=True)
    table.add_column("Address", style="dim")
    table.add_column("Yield token")
    table.add_column("APR (%)", justify="right", style="green")
    for rated in listing.strategies:
        table.add_row(
            rated.strategy.label,
            rated.strategy.address,
            rated.strategy.yield_symbol,
            rated.apr_display,
        )
    console.print(Panel(table, title="[bold]Strategies[/]", border_style="blue"))


def render_summary(summary: ConfirmationSummary, console: Console | None = None) -> None:
    """Print the confirmation dashboard for a plan."""
    console = console or Console()

    deposit_table = _key_value_table("cyan")
    deposit_table.add_row("Type", summary.type)
    deposit_table.add_row("Amount", f"{summary.amount} {summary.token}")
    deposit_table.add_row("Collateral", summary.collateral)
    deposit_table.add_row("APR", f"{summary.apr}%" if summary.apr != "N/A" else "N/A")
    if summary.holytag:
        deposit_table.add_row("Holytag", summary.holytag)
    deposit_panel = Panel(deposit_table, title="[bold]Deposit[/]", border_style="blue")

    loan_table = _key_value_table("green")
    loan_table.add_row("Expected debt", _format_amount(summary.expected_debt))
    loan_table.add_row("Loan asset", summary.loan_asset)
    loan_panel = Panel(loan_table, title="[bold]Loan[/]", border_style="green")

    earnings_table = _key_value_table("yellow")
    if summary.earnings is None:
        earnings_table.add_row("Projection", "N/A")
    else:
        for period in ("daily", "weekly", "monthly", "yearly"):
            value = getattr(summary.earnings, period)
            earnings_table.add_row(
                period.capitalize(), f"{_format_amount(value)} {summary.token}"
            )
    earnings_panel = Panel(
        earnings_table, title="[bold]Projected earnings[/]", border_style="yellow"
    )

    parts: list = [
        Columns([deposit_panel, loan_panel], equal=True, expand=True),
        "",
        earnings_panel,
    ]
    if summary.implication:
        parts.extend(["", Text(summary.implication, style="dim")])

    console.print()
    console.print(
        Panel(
            Group(*parts),
            title=f"[bold white]Confirm {summary.type}[/]",
            border_style="white",
            padding=(1, 2),
        )
    )
    console.print()


def _steps_table(steps: dict, unconfirmed: dict[str, str] | None = None) -> Table:
    table = Table(expand=True)
    table.add_column("Step", style="cyan")
    table.add_column("Transaction", style="dim")
    table.add_column("Status")
    table.add_column("Amount (base units)", justify="right")
    for name, result in steps.items():
        amount = result.confirmed_amount
        table.add_row(
            name,
            result.transaction_hash or "-",
            "[green]confirmed[/]",
            f"{amount:,}" if amount is not None else "-",
        )
    for name, tx_hash in (unconfirmed or {}).items():
        table.add_row(name, tx_hash, "[yellow]unconfirmed[/]", "-")
    return table


def render_outcome(outcome: PipelineOutcome, console: Console | None = None) -> None:
    console = console or Console()
    parts: list = [_steps_table(outcome.steps)]
    if outcome.fiat_amount is not None:
        parts.extend(["", Text(f"Top-up value: EUR {outcome.fiat_amount}", style="bold green")])
    console.print(
        Panel(
            Group(*parts),
            title=f"[bold green]{outcome.mode.value} {outcome.state.value}[/]",
            border_style="green",
        )
    )


def render_failure(failure: PipelineFailure, console: Console | None = None) -> None:
    """Print a failure, separating partial completion from a clean no-op."""
    console = console or Console()
    if not failure.partial:
        console.print(
            Panel(
                Text(str(failure)),
                title=f"[bold red]Failed at {failure.failed_step}[/]",
                subtitle="No on-chain changes were made",
                border_style="red",
            )
        )
        return

    hashes = [
        _truncate_address(tx_hash)
        for tx_hash in [
            *(result.transaction_hash for result in failure.completed_steps.values()),
            *failure.unconfirmed_steps.values(),
        ]
        if tx_hash
    ]
    console.print(
        Panel(
            Group(
                Text(str(failure), style="bold"),
                "",
                _steps_table(failure.completed_steps, failure.unconfirmed_steps),
                "",
                Text(failure.recovery_hint(), style="yellow"),
            ),
            title=f"[bold red]Partially completed; failed at {failure.failed_step}[/]",
            subtitle=", ".join(hashes),
            border_style="red",
        )
    )
