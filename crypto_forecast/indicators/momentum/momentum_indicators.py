import math
from typing import Tuple

from crypto_forecast.analyzer.dataclasses import Candle
from crypto_forecast.indicators.base import Indicator
from crypto_forecast.indicators.overlap import EMA


class RSI(Indicator):
    """
    Relative Strength Index with Wilder smoothing.

    While fewer than ``length`` price changes were seen, the average gain and
    loss are plain means of the changes so far; afterwards each new change is
    blended in with weight 1 / length.
    """
    name = "rsi"

    def __init__(self, length: int = 14, **kwargs) -> None:
        if length <= 0:
            raise ValueError("RSI length must be positive")
        super().__init__(**kwargs)
        self.length = length
        self._prev_close = math.nan
        self._changes = 0
        self._avg_gain = 0.0
        self._avg_loss = 0.0

    @property
    def min_length(self) -> int:
        return self.length

    def _next(self, candle: Candle) -> float:
        close = candle.close
        if math.isnan(self._prev_close):
            self._prev_close = close
            return math.nan

        change = close - self._prev_close
        self._prev_close = close
        gain = change if change > 0 else 0.0
        loss = -change if change < 0 else 0.0

        self._changes += 1
        if self._changes <= self.length:
            self._avg_gain += (gain - self._avg_gain) / self._changes
            self._avg_loss += (loss - self._avg_loss) / self._changes
        else:
            self._avg_gain = (self._avg_gain * (self.length - 1) + gain) / self.length
            self._avg_loss = (self._avg_loss * (self.length - 1) + loss) / self.length

        if self._avg_loss == 0:
            return 100.0 if self._avg_gain > 0 else 50.0
        rs = self._avg_gain / self._avg_loss
        return 100.0 - 100.0 / (1.0 + rs)


class MACD(Indicator):
    """MACD line (fast EMA - slow EMA), its signal EMA and the histogram."""
    name = "macd"

    def __init__(self, fast: int = 12, slow: int = 26, signal: int = 9, **kwargs) -> None:
        super().__init__(**kwargs)
        self.fast_length = fast
        self.slow_length = slow
        self.signal_length = signal
        self._fast = EMA(fast)
        self._slow = EMA(slow)
        self._signal = EMA(signal)
        self.macd = math.nan
        self.signal = math.nan
        self.histogram = math.nan
        self.previous_histogram = math.nan

    @property
    def min_length(self) -> int:
        return self.slow_length + self.signal_length

    def _next(self, candle: Candle) -> float:
        self.previous_histogram = self.histogram
        self.macd = self._fast.add(candle.close) - self._slow.add(candle.close)
        self.signal = self._signal.add(self.macd)
        self.histogram = self.macd - self.signal
        return self.macd

    def snapshot(self) -> Tuple[float, float, float]:
        return self.macd, self.signal, self.histogram
