"""
Shared formatting helpers for prices, percentages and timestamps.

All timestamps are rendered in UTC so reports do not depend on the host timezone.
"""
import math
from datetime import datetime, timezone
from typing import Optional


def format_utc_ms(timestamp_ms: float, format_str: str = "%Y-%m-%d %H:%M:%S") -> str:
    """Format epoch milliseconds as a UTC string, 'N/A' when out of range."""
    try:
        return datetime.fromtimestamp(timestamp_ms / 1000, tz=timezone.utc).strftime(format_str)
    except (ValueError, TypeError, OSError, OverflowError):
        return "N/A"


def format_utc_seconds(timestamp_sec: float, format_str: str = "%Y-%m-%d") -> str:
    """Format epoch seconds as a UTC string, 'N/A' when out of range."""
    try:
        return datetime.fromtimestamp(timestamp_sec, tz=timezone.utc).strftime(format_str)
    except (ValueError, TypeError, OSError, OverflowError):
        return "N/A"


class FormatUtils:
    """Utility class for formatting indicator values in reports."""

    def fmt(self, val, precision: int = 2) -> str:
        """Format a value with a precision that depends on its magnitude"""
        if not self.is_valid_value(val):
            return "N/A"
        if 0 < abs(val) < 0.0000001:
            return f"{val:.{precision}e}"
        elif abs(val) < 0.001:
            return f"{val:.8f}"
        elif abs(val) < 0.1:
            return f"{val:.6f}"
        elif abs(val) < 10:
            return f"{val:.{max(precision, 4)}f}"
        return f"{val:,.{precision}f}"

    def price(self, val) -> str:
        """Dollar-prefixed price."""
        formatted = self.fmt(val)
        return formatted if formatted == "N/A" else f"${formatted}"

    def pct(self, val, precision: int = 2, signed: bool = False) -> str:
        if not self.is_valid_value(val):
            return "N/A"
        return f"{val:+.{precision}f}%" if signed else f"{val:.{precision}f}%"

    def volume(self, val) -> str:
        if not self.is_valid_value(val):
            return "N/A"
        return f"{val:,.2f}"

    def format_timestamp(self, timestamp_ms, format_str: str = "%Y-%m-%d %H:%M:%S") -> str:
        """Format a timestamp from milliseconds since epoch to a UTC string"""
        return format_utc_ms(timestamp_ms, format_str)

    def format_date_from_timestamp(self, timestamp_sec) -> str:
        """Format seconds since epoch to date only (YYYY-MM-DD)."""
        return format_utc_seconds(timestamp_sec, "%Y-%m-%d")

    def format_current_time(self, format_str: str = "%Y-%m-%d %H:%M UTC") -> str:
        return datetime.now(tz=timezone.utc).strftime(format_str)

    def is_valid_value(self, value: Optional[float]) -> bool:
        """True for finite int/float values (bools excluded)."""
        return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)
