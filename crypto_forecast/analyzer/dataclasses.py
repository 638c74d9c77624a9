"""Dataclasses for market data, indicator results and summary statistics.

Every result type is frozen: the engine creates it once and the report
formatter only reads it.
"""

from dataclasses import dataclass, field
from typing import ClassVar, Dict, Optional, Tuple


# ==================== Market Data ====================

@dataclass(frozen=True, slots=True)
class Candle:
    """One OHLCV bucket as delivered by the exchange."""
    open_time: int                   # epoch milliseconds
    open: float
    high: float
    low: float
    close: float
    volume: float


@dataclass(frozen=True, slots=True)
class SentimentPoint:
    """Fear & Greed Index entry, kept in the provider's string encoding."""
    timestamp: str                   # epoch seconds
    value: str                       # "0".."100"
    classification: str              # "Extreme Fear" .. "Extreme Greed"

    @property
    def timestamp_seconds(self) -> Optional[int]:
        try:
            return int(self.timestamp)
        except (TypeError, ValueError):
            return None


# ==================== Indicator Results ====================

@dataclass(frozen=True, slots=True, kw_only=True)
class IndicatorResult:
    """Base of the indicator result union; ``kind`` tags the variant."""
    kind: ClassVar[str] = "indicator"
    label: Optional[str] = None


@dataclass(frozen=True, slots=True, kw_only=True)
class SMAResult(IndicatorResult):
    kind: ClassVar[str] = "sma"
    values: Dict[int, float]
    history: Dict[int, Tuple[float, ...]] = field(default_factory=dict)
    short_term_trend: str = ""
    long_term_trend: Optional[str] = None
    price_position: Optional[str] = None


@dataclass(frozen=True, slots=True, kw_only=True)
class EMAResult(IndicatorResult):
    kind: ClassVar[str] = "ema"
    values: Dict[int, float]
    history: Dict[int, Tuple[float, ...]] = field(default_factory=dict)
    short_term_trend: str = ""
    long_term_trend: Optional[str] = None
    cross_alert: Optional[str] = None


@dataclass(frozen=True, slots=True, kw_only=True)
class RSIResult(IndicatorResult):
    kind: ClassVar[str] = "rsi"
    period: int
    value: float
    history: Tuple[float, ...] = ()


@dataclass(frozen=True, slots=True, kw_only=True)
class MACDResult(IndicatorResult):
    kind: ClassVar[str] = "macd"
    macd: float
    signal: float
    histogram: float
    history: Tuple[Tuple[float, float, float], ...] = ()
    crossover: Optional[str] = None
    strength: str = ""


@dataclass(frozen=True, slots=True, kw_only=True)
class BollingerBandsResult(IndicatorResult):
    kind: ClassVar[str] = "bollinger"
    upper: float
    middle: float
    lower: float
    position_pct: float
    history: Tuple[Tuple[float, float, float], ...] = ()


@dataclass(frozen=True, slots=True, kw_only=True)
class OBVResult(IndicatorResult):
    kind: ClassVar[str] = "obv"
    value: float
    change_pct: float
    history: Tuple[float, ...] = ()


@dataclass(frozen=True, slots=True, kw_only=True)
class ATRResult(IndicatorResult):
    kind: ClassVar[str] = "atr"
    period: int
    value: float
    percent_of_price: float
    history: Tuple[float, ...] = ()


@dataclass(frozen=True, slots=True, kw_only=True)
class SupportResistanceResult(IndicatorResult):
    kind: ClassVar[str] = "support_resistance"
    support: float
    resistance: float


# ==================== Summary Statistics ====================

@dataclass(frozen=True, slots=True)
class SummaryStatistics:
    """Whole-period statistics of a candle series."""
    count: int
    first_open_time: int
    last_open_time: int
    last_close: float
    period_high: float
    period_low: float
    change: float
    change_pct: float
    mean_close: float
    mean_volume: float
    total_volume: float
    returns_stdev_pct: float
