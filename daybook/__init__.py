"""DayBook - a local trading journal with a calendar dashboard."""

__version__ = "0.1.0"
