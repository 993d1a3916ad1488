"""
Exceptions raised by the analytics engine and its HTTP surface.
"""

from typing import Optional


class AnalyticsError(Exception):
    """Base exception carrying a message that is safe to show to callers."""

    def __init__(self, message: str, user_message: Optional[str] = None):
        super().__init__(message)
        self.user_message = user_message or message


class InvariantViolation(RuntimeError):
    """An internal consistency check failed. This is a bug, not bad input."""

    def __init__(self, detail: str):
        super().__init__(f"Invariant violated: {detail}")


class UnknownSortKeyError(AnalyticsError):
    """Raised for a leaderboard sort key or delta metric we do not support."""

    def __init__(self, key: str, allowed):
        super().__init__(
            f"Unknown sort key '{key}'",
            f"Unsupported sort key '{key}'. Use one of: {', '.join(allowed)}.",
        )


class UnknownTableError(AnalyticsError):
    """Raised when asked to export a table that does not exist."""

    def __init__(self, table: str, allowed):
        super().__init__(
            f"Unknown export table '{table}'",
            f"Unknown table '{table}'. Use one of: {', '.join(allowed)}.",
        )
