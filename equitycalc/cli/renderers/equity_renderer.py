"""Rich renderers for vesting, tax and scenario output.

Transforms SDK records into formatted Rich tables.
"""

from typing import List, Optional

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from equitycalc.sdk import Grant, PortfolioSummary, ScenarioSummary, TaxResult, VestEvent


def format_currency(amount: Optional[float]) -> str:
    """Whole-dollar currency: $1,000 / -$1,000."""
    if amount is None:
        return "-"
    rounded = round(amount)
    if rounded < 0:
        return f"-${-rounded:,}"
    return f"${rounded:,}"


def format_percentage(value: Optional[float], decimals: int = 1) -> str:
    if value is None:
        return "-"
    return f"{value:.{decimals}f}%"


def render_vesting_table(console: Console, rows: List[tuple]) -> None:
    """Render one line per grant.

    Args:
        console: Rich Console instance
        rows: (Grant, VestingStatus) pairs
    """
    as_of = rows[0][1].as_of if rows else None
    table = Table(title=f"Vesting as of {as_of}" if as_of else "Vesting", box=box.ROUNDED)
    table.add_column("Grant", style="bold")
    table.add_column("Company")
    table.add_column("Type")
    table.add_column("Total", justify="right")
    table.add_column("Vested", justify="right")
    table.add_column("%", justify="right")
    table.add_column("Next Vest", justify="right")

    total_shares = 0
    total_vested = 0
    for grant, status in rows:
        vested = f"{status.vested_shares:,}"
        if status.source == "overridden":
            vested = f"[magenta]{vested}*[/magenta]"
        next_vest = "-"
        if status.next_vesting_date:
            next_vest = f"{status.next_vesting_date} (+{status.next_vesting_shares:,})"
        table.add_row(
            grant.id or "-",
            grant.company_name or "-",
            grant.grant_type.value,
            f"{status.total_shares:,}",
            vested,
            format_percentage(status.vested_percentage),
            next_vest,
        )
        total_shares += status.total_shares
        total_vested += status.vested_shares

    if len(rows) > 1:
        table.add_row(
            "[bold]Total[/bold]", "", "", f"{total_shares:,}", f"{total_vested:,}", "", "",
            style="dim",
        )

    console.print(table)
    if any(status.source == "overridden" for _, status in rows):
        console.print("[dim]* vested count overridden in the portfolio[/dim]")


def render_schedule(console: Console, grant: Grant, events: List[VestEvent]) -> None:
    """Render a grant's full vesting schedule."""
    table = Table(title=f"Schedule: {grant.id or grant.company_name or 'grant'}", box=box.SIMPLE)
    table.add_column("Date")
    table.add_column("Event")
    table.add_column("Shares", justify="right")
    table.add_column("Cumulative", justify="right")

    for event in events:
        style = "bold" if event.event in ("cliff", "final") else None
        table.add_row(
            str(event.vest_date), event.event, f"{event.shares:,}", f"{event.cumulative_shares:,}",
            style=style,
        )

    console.print(table)


def render_tax_result(console: Console, result: TaxResult) -> None:
    """Render a single tax calculation."""
    table = Table(
        title=f"{result.grant_type.value} sale: {result.shares:,} shares ({result.holding_period.value.replace('_', ' ')})",
        box=box.ROUNDED,
    )
    table.add_column("", style="bold", min_width=22)
    table.add_column("Amount", justify="right", min_width=12)

    table.add_row("Gross Proceeds", format_currency(result.gross_proceeds))
    table.add_row("Exercise Cost", format_currency(result.exercise_cost))
    table.add_row("", "")
    table.add_row("Ordinary Income", format_currency(result.ordinary_income))
    table.add_row("Capital Gains", format_currency(result.capital_gains))
    table.add_row("", "")
    table.add_row("  Ordinary Income Tax", format_currency(result.ordinary_income_tax))
    table.add_row("  Capital Gains Tax", format_currency(result.capital_gains_tax))
    if result.amt:
        table.add_row("  AMT", format_currency(result.amt))
    for share in result.state_allocation:
        table.add_row(
            f"  [dim]{share.state} state tax ({format_percentage(share.percentage * 100)} of workdays)[/dim]",
            f"[dim]{format_currency(share.state_tax)}[/dim]",
        )
    table.add_row("  [dim]Total Tax[/dim]", f"[dim]{format_currency(result.total_tax)}[/dim]")
    table.add_row("", "")
    table.add_row(
        "[bold green]NET PROCEEDS[/bold green]",
        f"[bold green]{format_currency(result.net_proceeds)}[/bold green]",
    )

    console.print(table)


def render_scenarios(console: Console, summaries: List[ScenarioSummary], title: str = "Scenario Comparison") -> None:
    """Render scenario summaries side by side, best net proceeds highlighted."""
    if not summaries:
        console.print(Panel("[yellow]No scenarios to compare[/yellow]", border_style="yellow"))
        return

    best = max(s.net_proceeds for s in summaries)

    table = Table(title=title, box=box.ROUNDED)
    table.add_column("Scenario", style="bold")
    table.add_column("Exit Type")
    table.add_column("Exit Price", justify="right")
    table.add_column("Shares", justify="right")
    table.add_column("Gross", justify="right")
    table.add_column("Exercise", justify="right")
    table.add_column("Tax", justify="right")
    table.add_column("Net", justify="right")
    table.add_column("ROI", justify="right")
    table.add_column("Tax Rate", justify="right")

    for s in summaries:
        net = format_currency(s.net_proceeds)
        if s.grants_included and s.net_proceeds == best:
            net = f"[bold green]{net}[/bold green]"
        table.add_row(
            s.scenario_name,
            s.exit_type,
            f"${s.exit_price:,.2f}",
            f"{s.shares_included:,}",
            format_currency(s.gross_proceeds),
            format_currency(s.exercise_cost),
            format_currency(s.tax_liability),
            net,
            format_percentage(s.roi_percentage),
            format_percentage(s.effective_tax_rate),
        )

    console.print(table)


def render_portfolio_summary(console: Console, summary: PortfolioSummary) -> None:
    """Render portfolio totals and the value breakdowns."""
    if not summary.grants_included:
        console.print(Panel("[yellow]No grants match the filters[/yellow]", border_style="yellow"))
        return

    table = Table(title=f"Portfolio as of {summary.as_of}", box=box.ROUNDED)
    table.add_column("", style="bold", min_width=22)
    table.add_column("Value", justify="right", min_width=12)

    table.add_row("Grants", f"{summary.grants_included:,}")
    table.add_row("Total Shares", f"{summary.total_shares:,}")
    table.add_row("Vested Shares", f"{summary.vested_shares:,}")
    table.add_row("Unvested Shares", f"{summary.unvested_shares:,}")
    table.add_row("", "")
    table.add_row("Current Value", format_currency(summary.current_value))
    table.add_row("Exercise Cost", format_currency(summary.exercise_cost))
    table.add_row(
        "[bold green]POTENTIAL GAIN[/bold green]",
        f"[bold green]{format_currency(summary.potential_gain)}[/bold green]",
    )
    table.add_row("", "")
    table.add_row("ISO / RSU Split", f"{format_percentage(summary.iso_percentage)} / {format_percentage(summary.rsu_percentage)}")
    console.print(table)

    for title, rows in (("By Grant Type", summary.value_by_grant_type), ("By Company", summary.value_by_company)):
        if not rows:
            continue
        breakdown = Table(title=title, box=box.SIMPLE)
        breakdown.add_column("Name")
        breakdown.add_column("Value", justify="right")
        breakdown.add_column("%", justify="right")
        for row in rows:
            breakdown.add_row(row.name, format_currency(row.value), format_percentage(row.percentage))
        console.print(breakdown)
