"""Journal logic: P&L arithmetic, aggregation and the trade-entry form."""

from daybook.journal.form import EMOTION_CHOICES, FormState, TradeForm
from daybook.journal.stats import (
    compute_daily_stats,
    compute_monthly_stats,
    compute_pnl,
    days_in_month,
    heat,
    win_rate,
)

__all__ = [
    "EMOTION_CHOICES",
    "FormState",
    "TradeForm",
    "compute_daily_stats",
    "compute_monthly_stats",
    "compute_pnl",
    "days_in_month",
    "heat",
    "win_rate",
]
