"""Data models for DayBook."""

from daybook.models.trade import (
    Emotions,
    Screenshot,
    TradeEntry,
    TradeRecord,
    VoiceNote,
    dump_records,
    parse_records,
)
from daybook.models.stats import DailyStats, Heat, MonthlyStats

__all__ = [
    "Emotions",
    "Screenshot",
    "TradeEntry",
    "TradeRecord",
    "VoiceNote",
    "dump_records",
    "parse_records",
    "DailyStats",
    "Heat",
    "MonthlyStats",
]
