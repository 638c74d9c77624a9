from collections import deque
from typing import Deque

from crypto_forecast.analyzer.dataclasses import Candle
from crypto_forecast.indicators.base import Indicator, safe_div


class OBV(Indicator):
    """
    On Balance Volume.

    Starts at 0 on the first candle; each later candle adds its volume when the
    close rose, subtracts it when the close fell and leaves OBV unchanged on a
    flat close.
    """
    name = "obv"

    def __init__(self, change_lookback: int = 5, **kwargs) -> None:
        super().__init__(**kwargs)
        self.change_lookback = change_lookback
        self._prev_close = None
        self._obv = 0.0
        self._recent: Deque[float] = deque(maxlen=change_lookback)

    @property
    def min_length(self) -> int:
        return 2

    def _next(self, candle: Candle) -> float:
        if self._prev_close is not None:
            if candle.close > self._prev_close:
                self._obv += candle.volume
            elif candle.close < self._prev_close:
                self._obv -= candle.volume
        self._prev_close = candle.close
        self._recent.append(self._obv)
        return self._obv

    @property
    def change_pct(self) -> float:
        """Percent change of OBV against the oldest of the last ``change_lookback`` values."""
        if self.count <= self.change_lookback:
            return 0.0
        return safe_div(self._obv - self._recent[0], abs(self._obv)) * 100.0
