"""Exceptions raised by DayBook."""


class DayBookError(Exception):
    """Base class for DayBook errors."""


class InvalidPnLInput(DayBookError, ValueError):
    """Raised when P&L cannot be computed from the given inputs."""


class TradeValidationError(DayBookError):
    """Raised when a trade entry cannot be saved.

    The message is meant to be shown to the user as-is.
    """


class MalformedBucketError(DayBookError):
    """Raised when a stored day bucket cannot be parsed for an update.

    The stored value is left untouched.
    """
