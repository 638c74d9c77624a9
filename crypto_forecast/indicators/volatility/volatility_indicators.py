import math
from collections import deque
from typing import Deque, Tuple

from crypto_forecast.analyzer.dataclasses import Candle
from crypto_forecast.indicators.base import Indicator
from crypto_forecast.indicators.overlap import SMA


class BollingerBands(Indicator):
    """SMA middle band with bands ``num_std`` population standard deviations away."""
    name = "bollinger"

    def __init__(self, length: int = 20, num_std: float = 2.0, **kwargs) -> None:
        super().__init__(**kwargs)
        self.length = length
        self.num_std = num_std
        self._middle = SMA(length)
        self._buffer: Deque[float] = deque(maxlen=length)
        self.upper = math.nan
        self.middle = math.nan
        self.lower = math.nan

    @property
    def min_length(self) -> int:
        return self.length

    def _next(self, candle: Candle) -> float:
        self._buffer.append(candle.close)
        self.middle = self._middle.add(candle.close)
        if math.isnan(self.middle):
            return math.nan

        variance = sum((x - self.middle) ** 2 for x in self._buffer) / self.length
        deviation = math.sqrt(variance)
        self.upper = self.middle + self.num_std * deviation
        self.lower = self.middle - self.num_std * deviation
        return self.middle

    def snapshot(self) -> Tuple[float, float, float]:
        return self.upper, self.middle, self.lower


class ATR(Indicator):
    """Average True Range with Wilder smoothing; the first true range is high - low."""
    name = "atr"

    def __init__(self, length: int = 14, **kwargs) -> None:
        if length <= 0:
            raise ValueError("ATR length must be positive")
        super().__init__(**kwargs)
        self.length = length
        self._prev_close = math.nan
        self._atr = 0.0

    @property
    def min_length(self) -> int:
        return self.length

    @staticmethod
    def true_range(high: float, low: float, prev_close: float) -> float:
        if math.isnan(prev_close):
            return high - low
        return max(high - low, abs(high - prev_close), abs(low - prev_close))

    def _next(self, candle: Candle) -> float:
        tr = self.true_range(candle.high, candle.low, self._prev_close)
        self._prev_close = candle.close
        if self.count <= self.length:
            self._atr += (tr - self._atr) / self.count
        else:
            self._atr = (self._atr * (self.length - 1) + tr) / self.length
        return self._atr
