"""CLI commands for DayBook.

This package provides the command-line interface: the monthly
calendar, the per-day session view and the trade-entry commands.
"""

from daybook.cli.main import cli, main

__all__ = ["cli", "main"]
