"""P&L arithmetic and daily/monthly aggregation.

All functions here are pure; storage is reached only through the
``load_day`` callable handed to :func:`compute_monthly_stats`.
"""

import calendar
import math
from datetime import date
from typing import Any, Callable, Iterable

from daybook.errors import InvalidPnLInput
from daybook.models import DailyStats, Heat, MonthlyStats, TradeEntry

SIDES = ("long", "short")


def _to_number(name: str, value: Any) -> float:
    if value is None or isinstance(value, bool):
        raise InvalidPnLInput(f"{name} is required")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise InvalidPnLInput(f"{name} is not a number: {value!r}") from None
    if not math.isfinite(number):
        raise InvalidPnLInput(f"{name} must be finite: {value!r}")
    return number


def compute_pnl(side: str, entry_price: Any, exit_price: Any, quantity: Any) -> float:
    """Calculate the P&L of a closed trade.

    Args:
        side: 'long' or 'short'.
        entry_price: Entry price, a number or numeric string.
        exit_price: Exit price, a number or numeric string.
        quantity: Contracts or lots, a number or numeric string.

    Returns:
        P&L rounded to 2 decimal places.

    Raises:
        InvalidPnLInput: If the side is unknown or any input is missing,
            unparsable or not finite.
    """
    if side not in SIDES:
        raise InvalidPnLInput(f"side must be one of {', '.join(SIDES)}: {side!r}")

    entry = _to_number("entry price", entry_price)
    exit_ = _to_number("exit price", exit_price)
    qty = _to_number("quantity", quantity)

    if side == "long":
        pnl = (exit_ - entry) * qty
    else:
        pnl = (entry - exit_) * qty

    if not math.isfinite(pnl):
        raise InvalidPnLInput("P&L overflowed")
    return round(pnl, 2)


def compute_daily_stats(records: Iterable) -> DailyStats:
    """Aggregate the trade entries of one daily bucket.

    Attachment records (voice notes, screenshots) are skipped.
    """
    pnl = 0.0
    trade_count = 0
    win_count = 0

    for record in records:
        if not isinstance(record, TradeEntry):
            continue
        trade_count += 1
        pnl += record.pnl
        if record.pnl > 0:
            win_count += 1

    return DailyStats(pnl=pnl, trade_count=trade_count, win_count=win_count)


def days_in_month(year: int, month: int) -> int:
    """Number of days in a Gregorian calendar month."""
    return calendar.monthrange(year, month)[1]


def win_rate(win_count: int, trade_count: int) -> int:
    """Win percentage rounded half up, 0 when there are no trades."""
    if trade_count <= 0:
        return 0
    return int(math.floor(100 * win_count / trade_count + 0.5))


def compute_monthly_stats(
    year: int,
    month: int,
    load_day: Callable[[date], list],
) -> MonthlyStats:
    """Aggregate every daily bucket in a month.

    Args:
        year: Calendar year.
        month: Calendar month (1-12).
        load_day: Returns the records stored for a date.

    Returns:
        Month totals and per-day stats for days holding any record.
    """
    total_pnl = 0.0
    trade_count = 0
    win_count = 0
    per_day: dict[int, DailyStats] = {}

    for day in range(1, days_in_month(year, month) + 1):
        records = load_day(date(year, month, day))
        if not records:
            continue

        stats = compute_daily_stats(records)
        per_day[day] = stats
        total_pnl += stats.pnl
        trade_count += stats.trade_count
        win_count += stats.win_count

    return MonthlyStats(
        year=year,
        month=month,
        total_pnl=total_pnl,
        win_count=win_count,
        trade_count=trade_count,
        win_rate=win_rate(win_count, trade_count),
        per_day=per_day,
    )


def heat(pnl: float) -> Heat:
    """Calendar heat indicator for a day's P&L."""
    return Heat.from_pnl(pnl)
