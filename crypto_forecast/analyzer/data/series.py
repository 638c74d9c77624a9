"""Immutable, time-ordered candle series with parallel numpy channels."""
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Sequence, Tuple, Union, overload

import numpy as np
from numpy.typing import NDArray

from crypto_forecast.analyzer.dataclasses import Candle


def _readonly(values: Iterable[float], dtype=np.float64) -> NDArray:
    arr = np.fromiter(values, dtype=dtype)
    arr.flags.writeable = False
    return arr


class Series:
    """Ordered sequence of candles with strictly increasing ``open_time``.

    The single-channel views (closes, volumes, highs, lows, opens) are built once
    and exposed as read-only float64 arrays for indicators and statistics.
    """

    __slots__ = ("_candles", "open_times", "opens", "highs", "lows", "closes", "volumes")

    def __init__(self, candles: Sequence[Candle] = ()) -> None:
        candles = tuple(candles)
        for previous, current in zip(candles, candles[1:]):
            if current.open_time <= previous.open_time:
                raise ValueError(
                    f"Series requires strictly increasing open_time, got {previous.open_time} "
                    f"followed by {current.open_time}"
                )
        self._candles: Tuple[Candle, ...] = candles
        self.open_times = _readonly((c.open_time for c in candles), dtype=np.int64)
        self.opens = _readonly(c.open for c in candles)
        self.highs = _readonly(c.high for c in candles)
        self.lows = _readonly(c.low for c in candles)
        self.closes = _readonly(c.close for c in candles)
        self.volumes = _readonly(c.volume for c in candles)

    @property
    def candles(self) -> Tuple[Candle, ...]:
        return self._candles

    def __len__(self) -> int:
        return len(self._candles)

    def __iter__(self) -> Iterator[Candle]:
        return iter(self._candles)

    @overload
    def __getitem__(self, index: int) -> Candle: ...

    @overload
    def __getitem__(self, index: slice) -> Tuple[Candle, ...]: ...

    def __getitem__(self, index: Union[int, slice]):
        return self._candles[index]

    def __bool__(self) -> bool:
        return bool(self._candles)

    def __repr__(self) -> str:
        if not self._candles:
            return "Series(empty)"
        return f"Series({len(self)} candles, {self._candles[0].open_time}..{self._candles[-1].open_time})"

    def tail(self, n: int) -> Tuple[Candle, ...]:
        """Last ``n`` candles (all of them when ``n`` <= 0 or exceeds the length)."""
        if n <= 0 or n >= len(self._candles):
            return self._candles
        return self._candles[-n:]

    @property
    def last_close(self) -> float:
        return self._candles[-1].close if self._candles else 0.0


def merge_candles(pages: Iterable[Iterable[Candle]]) -> Series:
    """Merge candle pages into one ascending series.

    Pages may arrive out of order or overlap at their boundaries. Candles are
    sorted by ``open_time`` (stable, so input order breaks ties) and only the
    first occurrence of each ``open_time`` is kept.
    """
    combined: List[Candle] = [candle for page in pages for candle in page]
    combined.sort(key=lambda candle: candle.open_time)

    merged: List[Candle] = []
    for candle in combined:
        if merged and merged[-1].open_time == candle.open_time:
            continue
        merged.append(candle)
    return Series(merged)


@dataclass(frozen=True, slots=True)
class FetchResult:
    """Outcome of a paged fetch.

    ``truncated`` is set when pagination stopped early because a later page
    failed or the request budget ran out, so ``series`` may miss its tail.
    """
    series: Series
    truncated: bool = False
    requests: int = 0
