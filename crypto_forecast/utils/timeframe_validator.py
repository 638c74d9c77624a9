"""
Timeframe validation and conversion utilities.

Maps Binance kline intervals to their length so the fetcher can bound the
number of page requests it issues for a time range.
"""

import math
from typing import Optional


class TimeframeValidator:
    """Validates and converts Binance kline intervals"""

    SUPPORTED_TIMEFRAMES = ['1m', '3m', '5m', '15m', '30m', '1h', '2h', '4h', '6h', '8h', '12h', '1d', '3d', '1w', '1M']

    # Interval to minutes mapping ('1M' uses a 30-day month, only for request budgeting)
    TIMEFRAME_MINUTES = {
        '1m': 1,
        '3m': 3,
        '5m': 5,
        '15m': 15,
        '30m': 30,
        '1h': 60,
        '2h': 120,
        '4h': 240,
        '6h': 360,
        '8h': 480,
        '12h': 720,
        '1d': 1440,
        '3d': 4320,
        '1w': 10080,
        '1M': 43200
    }

    @classmethod
    def validate(cls, timeframe: str) -> bool:
        """Check if the interval is a Binance kline interval."""
        return timeframe in cls.SUPPORTED_TIMEFRAMES

    @classmethod
    def to_minutes(cls, timeframe: str) -> int:
        """
        Convert interval to minutes.

        Raises:
            ValueError: If interval is not recognized
        """
        if timeframe not in cls.TIMEFRAME_MINUTES:
            raise ValueError(f"Unrecognized timeframe: {timeframe}")
        return cls.TIMEFRAME_MINUTES[timeframe]

    @classmethod
    def to_milliseconds(cls, timeframe: str) -> int:
        return cls.to_minutes(timeframe) * 60_000

    @classmethod
    def max_page_requests(cls, start_ms: int, end_ms: int, page_limit: int, timeframe: Optional[str]) -> Optional[int]:
        """
        Upper bound of page requests needed to cover [start_ms, end_ms].

        Example:
            >>> TimeframeValidator.max_page_requests(0, 4_000 * 14_400_000, 1000, "4h")
            5  # ceil(4000 candles / 1000 per page) + 1
        """
        if timeframe is None or not cls.validate(timeframe) or page_limit <= 0:
            return None
        span = max(end_ms - start_ms, 0)
        per_page = page_limit * cls.to_milliseconds(timeframe)
        return math.ceil(span / per_page) + 1
