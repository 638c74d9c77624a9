import math
from collections import deque
from typing import Deque

from crypto_forecast.analyzer.dataclasses import Candle
from crypto_forecast.indicators.base import Indicator


class SMA(Indicator):
    """Trailing arithmetic mean of the last ``length`` closes."""
    name = "sma"

    def __init__(self, length: int, **kwargs) -> None:
        if length <= 0:
            raise ValueError("SMA length must be positive")
        super().__init__(**kwargs)
        self.length = length
        self._buffer: Deque[float] = deque(maxlen=length)
        self._sum = 0.0
        self._updates = 0

    @property
    def min_length(self) -> int:
        return self.length

    def add(self, value: float) -> float:
        if len(self._buffer) == self.length:
            self._sum -= self._buffer[0]
        self._buffer.append(value)
        self._sum += value
        self._updates += 1
        if self._updates % self.length == 0:
            # exact resum bounds accumulated rounding error
            self._sum = math.fsum(self._buffer)
        if len(self._buffer) < self.length:
            return math.nan
        return self._sum / self.length

    def _next(self, candle: Candle) -> float:
        return self.add(candle.close)


class EMA(Indicator):
    """Exponential moving average, alpha = 2 / (length + 1), seeded with the first value."""
    name = "ema"

    def __init__(self, length: int, **kwargs) -> None:
        if length <= 0:
            raise ValueError("EMA length must be positive")
        super().__init__(**kwargs)
        self.length = length
        self.alpha = 2.0 / (length + 1)
        self._ema = math.nan

    @property
    def min_length(self) -> int:
        return 1

    def add(self, value: float) -> float:
        if math.isnan(self._ema):
            self._ema = value
        else:
            self._ema = (value - self._ema) * self.alpha + self._ema
        return self._ema

    def _next(self, candle: Candle) -> float:
        return self.add(candle.close)
