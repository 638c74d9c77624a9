import math
from abc import ABC, abstractmethod
from collections import deque
from typing import Any, Deque, Generic, Iterator, Tuple, TypeVar

from crypto_forecast.analyzer.dataclasses import Candle

T = TypeVar("T")

TRAILING_WINDOW_SIZE = 5


class TrailingWindow(Generic[T]):
    """Fixed-size buffer holding the most recent values, oldest first."""

    __slots__ = ("_values",)

    def __init__(self, size: int = TRAILING_WINDOW_SIZE) -> None:
        if size <= 0:
            raise ValueError("Trailing window size must be positive")
        self._values: Deque[T] = deque(maxlen=size)

    def append(self, value: T) -> None:
        self._values.append(value)

    @property
    def size(self) -> int:
        return self._values.maxlen or 0

    def is_full(self) -> bool:
        return len(self._values) == self.size

    def values(self) -> Tuple[T, ...]:
        return tuple(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[T]:
        return iter(self._values)


def safe_div(numerator: float, denominator: float) -> float:
    """Divide, substituting 1.0 for a zero denominator."""
    return numerator / (denominator if denominator != 0 else 1.0)


class Indicator(ABC):
    """
    Streaming indicator.

    Subclasses own their recursive or windowed state and advance it by one
    candle per ``update`` call. ``value`` is ``nan`` until the indicator has
    seen enough candles to be defined. Once defined, each update also records
    ``snapshot()`` in the trailing window.
    """
    name: str = "indicator"

    def __init__(self, window_size: int = TRAILING_WINDOW_SIZE) -> None:
        self.count = 0
        self._value = math.nan
        self.window: TrailingWindow[Any] = TrailingWindow(window_size)

    @property
    @abstractmethod
    def min_length(self) -> int:
        """Candles needed before ``value`` is defined."""

    @abstractmethod
    def _next(self, candle: Candle) -> float:
        """Advance state by one candle and return the new primary value."""

    def update(self, candle: Candle) -> float:
        self.count += 1
        self._value = self._next(candle)
        if self.is_ready:
            self.window.append(self.snapshot())
        return self._value

    @property
    def value(self) -> float:
        return self._value

    @property
    def is_ready(self) -> bool:
        return self.count >= self.min_length and math.isfinite(self._value)

    def snapshot(self) -> Any:
        """Value stored in the trailing window; multi-line indicators return a tuple."""
        return self._value

    def history(self) -> Tuple[Any, ...]:
        return self.window.values()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(count={self.count}, value={self._value})"
