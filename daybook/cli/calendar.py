"""Calendar dashboard command for DayBook CLI.

Shows month P&L, win rate and trade count, followed by a calendar
grid where each day is coloured by its P&L heat.
"""

import calendar as cal
from datetime import date
from typing import Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from daybook.cli.context import format_pnl, get_settings, get_trade_store
from daybook.journal.stats import compute_monthly_stats
from daybook.models import DailyStats, Heat, MonthlyStats

console = Console()

WEEKDAY_HEADERS = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]

HEAT_STYLES = {
    Heat.POSITIVE: "on dark_green",
    Heat.NEGATIVE: "on dark_red",
    Heat.NEUTRAL: "",
}


def render_day_cell(day: int, stats: Optional[DailyStats], currency: str = "$") -> str:
    """Markup for one calendar cell."""
    lines = [f"[dim]{day}[/dim]"]
    if stats is None:
        return "\n".join(lines)

    if stats.pnl != 0:
        arrow = "▲" if stats.pnl > 0 else "▼"
        color = "green" if stats.pnl > 0 else "red"
        lines.append(f"[{color}]{arrow}{currency}{abs(stats.pnl):,.0f}[/{color}]")
    if stats.trade_count > 0:
        plural = "s" if stats.trade_count > 1 else ""
        lines.append(f"[dim]{stats.trade_count} trade{plural}[/dim]")
    return "\n".join(lines)


def build_calendar_table(stats: MonthlyStats, currency: str = "$") -> Table:
    """Sunday-first calendar grid for a month."""
    title = date(stats.year, stats.month, 1).strftime("%B %Y")
    table = Table(title=title, show_header=True, header_style="bold cyan", show_lines=True)
    for header in WEEKDAY_HEADERS:
        table.add_column(header, justify="left", min_width=8)

    month_weeks = cal.Calendar(firstweekday=cal.SUNDAY).monthdayscalendar(stats.year, stats.month)
    for week in month_weeks:
        cells = []
        for day in week:
            if day == 0:
                cells.append("")
                continue
            day_stats = stats.per_day.get(day)
            text = render_day_cell(day, day_stats, currency)
            if day_stats is not None and HEAT_STYLES[day_stats.heat]:
                text = f"[{HEAT_STYLES[day_stats.heat]}]{text}[/]"
            cells.append(text)
        table.add_row(*cells)

    return table


def build_summary_panel(stats: MonthlyStats, currency: str = "$") -> Panel:
    """Month P&L, win rate and trade count."""
    rate_color = "green" if stats.win_rate >= 50 else "red"
    text = (
        f"Month P&L:    {format_pnl(stats.total_pnl, currency)}\n"
        f"Win Rate:     [{rate_color}]{stats.win_rate}%[/{rate_color}]\n"
        f"Total Trades: {stats.trade_count}"
    )
    return Panel(text, title="[bold cyan]Month Stats[/bold cyan]", border_style="cyan")


@click.command()
@click.option("--year", type=click.IntRange(1, 9999), default=None, help="Year to show (default: current).")
@click.option(
    "--month",
    "month_number",
    type=click.IntRange(1, 12),
    default=None,
    help="Month to show, 1-12 (default: current).",
)
@click.pass_context
def month(ctx: click.Context, year: Optional[int], month_number: Optional[int]) -> None:
    """Display the monthly calendar dashboard.

    \b
    Examples:
      daybook month                       # Current month
      daybook month --year 2024 --month 2 # February 2024
    """
    today = date.today()
    if year is None:
        year = today.year
    if month_number is None:
        month_number = today.month

    settings = get_settings(ctx)
    store = get_trade_store(settings)

    stats = compute_monthly_stats(year, month_number, store.load_day)

    console.print(build_summary_panel(stats, settings.currency))
    console.print(build_calendar_table(stats, settings.currency))
