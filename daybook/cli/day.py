"""Per-day journal commands for DayBook CLI.

Handles the session view for a date, trade entry, removal and
voice/screenshot attachments.
"""

from typing import NoReturn, Optional

import click
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from daybook.cli.context import format_pnl, get_settings, get_trade_store, parse_day
from daybook.errors import MalformedBucketError, TradeValidationError
from daybook.journal.form import EMOTION_CHOICES, TradeForm
from daybook.journal.stats import compute_daily_stats, win_rate
from daybook.models import Screenshot, TradeEntry, VoiceNote

console = Console()


def _abort_malformed(error: MalformedBucketError) -> NoReturn:
    console.print(Panel(
        f"[red]{escape(str(error))}[/red]\n"
        "[dim]Fix or remove the stored bucket before writing to this date.[/dim]",
        title="[bold red]Day Not Updated[/bold red]",
        border_style="red",
    ))
    raise SystemExit(1)


def _format_number(value: Optional[float]) -> str:
    if value is None:
        return "?"
    return f"{value:g}"


def _emotion_summary(entry: TradeEntry) -> str:
    parts = [
        f"{stage}: {getattr(entry.emotions, stage)}"
        for stage in ("pre", "during", "post")
        if getattr(entry.emotions, stage)
    ]
    return ", ".join(parts) or "-"


@click.command()
@click.argument("date", required=False)
@click.pass_context
def day(ctx: click.Context, date: Optional[str]) -> None:
    """Display session stats and the timeline for a date.

    \b
    Examples:
      daybook day              # Today
      daybook day 2024-12-19   # Specific date
    """
    trade_day = parse_day(date)
    settings = get_settings(ctx)
    store = get_trade_store(settings)

    records = store.load_day(trade_day)
    trades = [r for r in records if isinstance(r, TradeEntry)]
    attachments = [r for r in records if not isinstance(r, TradeEntry)]
    stats = compute_daily_stats(records)

    console.print(Panel(
        f"Total P&L: {format_pnl(stats.pnl, settings.currency)}\n"
        f"Win Rate:  {win_rate(stats.win_count, stats.trade_count)}%\n"
        f"Trades:    {stats.trade_count}",
        title=f"[bold cyan]Session Stats[/bold cyan] {trade_day.isoformat()} • {settings.timezone}",
        border_style="cyan",
    ))

    if not records:
        console.print(Panel(
            "[dim]No trades yet[/dim]",
            title="[bold]Session Timeline[/bold]",
            border_style="dim",
        ))
        return

    if trades:
        table = Table(title="Session Timeline", show_header=True, header_style="bold cyan")
        table.add_column("ID", style="dim", max_width=8)
        table.add_column("Symbol", style="bold")
        table.add_column("Side", justify="center")
        table.add_column("Qty", justify="right")
        table.add_column("Entry → Exit", justify="right")
        table.add_column("P&L", justify="right")
        table.add_column("Emotions", max_width=30)
        table.add_column("Notes", max_width=30)

        for trade in trades:
            side_color = "green" if trade.side == "long" else "red"
            notes = trade.notes or "-"
            if len(notes) > 30:
                notes = notes[:27] + "..."
            table.add_row(
                trade.id[:8],
                escape(trade.symbol),
                f"[{side_color}]{trade.side.upper()}[/{side_color}]",
                _format_number(trade.quantity),
                f"{_format_number(trade.entry_price)} → {_format_number(trade.exit_price)}",
                format_pnl(trade.pnl, settings.currency),
                escape(_emotion_summary(trade)),
                escape(notes),
            )
        console.print(table)

    for record in attachments:
        label = "Voice note" if isinstance(record, VoiceNote) else "Screenshot"
        console.print(f"[dim]{label}[/dim] {escape(record.ref)} [dim]({record.id[:8]})[/dim]")


@click.command()
@click.argument("date", required=False)
@click.option("--symbol", "-s", required=True, help="Instrument symbol.")
@click.option(
    "--side",
    type=click.Choice(["long", "short"], case_sensitive=False),
    default="long",
    show_default=True,
    help="Trade direction.",
)
@click.option("--entry", "entry_price", default="", help="Entry price.")
@click.option("--exit", "exit_price", default="", help="Exit price.")
@click.option("--qty", "quantity", default="", help="Quantity (contracts/lots).")
@click.option("--pnl", "manual_pnl", default=None, help="Manual P&L, overrides the computed one.")
@click.option("--rr", default="", help="Reward:risk, e.g. 1:2.")
@click.option("--notes", default="", help="Setup, confluence, market conditions.")
@click.option("--pre", default="", help=f"Emotion before entry ({', '.join(EMOTION_CHOICES['pre'])}).")
@click.option("--during", default="", help=f"Emotion during the trade ({', '.join(EMOTION_CHOICES['during'])}).")
@click.option("--post", default="", help=f"Emotion after exit ({', '.join(EMOTION_CHOICES['post'])}).")
@click.option("--voice", "voice_ref", default=None, help="Voice memo file for this trade.")
@click.option("--screenshot", "screenshots", multiple=True, help="Chart screenshot file (repeatable).")
@click.pass_context
def add(
    ctx: click.Context,
    date: Optional[str],
    symbol: str,
    side: str,
    entry_price: str,
    exit_price: str,
    quantity: str,
    manual_pnl: Optional[str],
    rr: str,
    notes: str,
    pre: str,
    during: str,
    post: str,
    voice_ref: Optional[str],
    screenshots: tuple[str, ...],
) -> None:
    """Log a trade for a date.

    P&L is computed from side, entry, exit and quantity unless --pnl
    is given.

    \b
    Examples:
      daybook add --symbol nq --side short --entry 18000 --exit 17950 --qty 1
      daybook add 2024-12-19 -s AAPL --pnl -42.5 --notes "Chased the open"
    """
    trade_day = parse_day(date)
    settings = get_settings(ctx)
    store = get_trade_store(settings)

    form = TradeForm(trade_day, store, timezone=settings.timezone)
    form.symbol = symbol
    form.side = side.lower()
    form.entry_price = entry_price
    form.exit_price = exit_price
    form.quantity = quantity
    form.manual_pnl = manual_pnl
    form.rr = rr
    form.notes = notes
    form.emotions = {"pre": pre, "during": during, "post": post}
    form.voice_note_ref = voice_ref
    form.screenshot_refs = list(screenshots)
    form.compute()

    try:
        entry = form.save()
    except TradeValidationError as e:
        console.print(Panel(
            f"[red]{escape(str(e))}[/red]",
            title="[bold red]Trade Not Saved[/bold red]",
            border_style="red",
        ))
        raise SystemExit(1)
    except MalformedBucketError as e:
        _abort_malformed(e)

    console.print(Panel(
        f"[bold]{escape(entry.symbol)}[/bold] {entry.side.upper()} "
        f"{format_pnl(entry.pnl, settings.currency)}\n"
        f"[dim]ID: {entry.id}[/dim]",
        title=f"[bold green]Trade Saved[/bold green] {trade_day.isoformat()}",
        border_style="green",
    ))


@click.command()
@click.argument("date")
@click.argument("record_id")
@click.pass_context
def remove(ctx: click.Context, date: str, record_id: str) -> None:
    """Remove a trade or attachment from a date.

    RECORD_ID may be the full ID or a unique prefix as shown by 'daybook day'.

    \b
    Examples:
      daybook remove 2024-12-19 3f2a9c1e
    """
    trade_day = parse_day(date)
    settings = get_settings(ctx)
    store = get_trade_store(settings)

    if not record_id.strip():
        console.print("[red]RECORD_ID must not be empty[/red]")
        raise SystemExit(1)

    try:
        records = store.load_day_for_update(trade_day)
    except MalformedBucketError as e:
        _abort_malformed(e)

    matches = [r.id for r in records if r.id.startswith(record_id)]
    if len(matches) != 1:
        reason = "No record" if not matches else "More than one record"
        console.print(f"[red]{reason} matches '{escape(record_id)}' on {trade_day}[/red]")
        raise SystemExit(1)

    store.remove(trade_day, matches[0])
    console.print(f"[green]Removed {matches[0]} from {trade_day}[/green]")


@click.command()
@click.argument("date")
@click.argument("ref")
@click.pass_context
def voice(ctx: click.Context, date: str, ref: str) -> None:
    """Attach a recorded voice note to a date.

    \b
    Examples:
      daybook voice today ~/recordings/open.webm
    """
    trade_day = parse_day(date)
    settings = get_settings(ctx)
    form = TradeForm(trade_day, get_trade_store(settings), timezone=settings.timezone)

    try:
        note = form.attach_voice(ref)
    except MalformedBucketError as e:
        _abort_malformed(e)
    console.print(f"[green]Voice note saved[/green] [dim]({note.id[:8]})[/dim]")


@click.command()
@click.argument("date")
@click.argument("refs", nargs=-1, required=True)
@click.pass_context
def screenshot(ctx: click.Context, date: str, refs: tuple[str, ...]) -> None:
    """Attach chart screenshots to a date.

    \b
    Examples:
      daybook screenshot today chart1.png chart2.png
    """
    trade_day = parse_day(date)
    settings = get_settings(ctx)
    form = TradeForm(trade_day, get_trade_store(settings), timezone=settings.timezone)

    try:
        shots: list[Screenshot] = form.attach_screenshots(list(refs))
    except MalformedBucketError as e:
        _abort_malformed(e)
    console.print(f"[green]{len(shots)} screenshot(s) saved[/green]")
