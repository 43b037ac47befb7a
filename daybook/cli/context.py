"""Helpers shared by the command modules."""

from datetime import date
from typing import Optional

import click

from daybook.config import Settings, load_config
from daybook.db.store import SqliteKeyValueStore, TradeStore


def get_settings(ctx: click.Context) -> Settings:
    """Load settings, honouring the group's --config option."""
    obj = ctx.find_root().obj or {}
    return load_config(obj.get("config_path"))


def get_trade_store(settings: Settings) -> TradeStore:
    """Get the trade store for the configured database."""
    kv = SqliteKeyValueStore(settings.db_path)
    return TradeStore(kv, namespace=settings.namespace)


def parse_day(value: Optional[str]) -> date:
    """Parse a YYYY-MM-DD argument; 'today' or None means today."""
    if value is None or value.lower() == "today":
        return date.today()
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise click.BadParameter(f"Invalid date: {value}. Use YYYY-MM-DD") from None


def format_pnl(pnl: float, currency: str = "$", decimals: int = 2) -> str:
    """Rich markup for a signed, coloured P&L amount."""
    color = "green" if pnl >= 0 else "red"
    sign = "+" if pnl >= 0 else "-"
    return f"[{color}]{sign}{currency}{abs(pnl):,.{decimals}f}[/{color}]"
