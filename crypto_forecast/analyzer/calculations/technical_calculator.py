"""
Streaming technical indicator engine.

Every indicator is an object with an ``update(candle)`` method; the calculator
feeds each candle of the series to every indicator exactly once and then reads
final values, trailing windows and labels from them.
"""
import math
from typing import Dict, List, Optional, Sequence

from crypto_forecast.analyzer.data.series import Series
from crypto_forecast.analyzer.dataclasses import (
    ATRResult,
    BollingerBandsResult,
    EMAResult,
    IndicatorResult,
    MACDResult,
    OBVResult,
    RSIResult,
    SMAResult,
    SummaryStatistics,
    SupportResistanceResult,
)
from crypto_forecast.indicators import ATR, EMA, MACD, OBV, RSI, SMA, BollingerBands, Indicator, SupportResistance
from crypto_forecast.indicators.base import safe_div
from crypto_forecast.indicators.constants import (
    ATR_LABELS,
    ATR_PERIOD,
    BOLLINGER_LABELS,
    BOLLINGER_PERIOD,
    BOLLINGER_STD,
    INDICATOR_THRESHOLDS,
    LONG_EMA_PERIODS,
    LONG_SMA_PERIODS,
    MACD_PERIODS,
    MACD_STRENGTH_LABELS,
    MIN_LENGTHS,
    OBV_CHANGE_LOOKBACK,
    OBV_LABELS,
    RSI_LABELS,
    RSI_PERIOD,
    SHORT_EMA_PERIODS,
    SHORT_SMA_PERIODS,
    SMA_PRICE_POSITION_LABELS,
)
from crypto_forecast.indicators.statistical import (
    mean_numba,
    pct_returns_numba,
    range_numba,
    stdev_numba,
    sum_numba,
)
from crypto_forecast.logger.logger import Logger


def _trend(fast: float, slow: float) -> str:
    return "Bullish" if fast > slow else "Bearish"


class TechnicalCalculator:
    """Core calculator for technical indicators"""

    def __init__(self, logger: Optional[Logger] = None, trailing_window: bool = True):
        self.logger = logger
        self.trailing_window = trailing_window
        self.INDICATOR_THRESHOLDS = INDICATOR_THRESHOLDS

    def _build_indicators(self, length: int) -> Dict[str, Indicator]:
        """Instantiate fresh indicator state for a series of ``length`` candles."""
        sma_periods = SHORT_SMA_PERIODS
        ema_periods = SHORT_EMA_PERIODS
        if length >= MIN_LENGTHS['long_moving_average']:
            sma_periods += LONG_SMA_PERIODS
            ema_periods += LONG_EMA_PERIODS

        indicators: Dict[str, Indicator] = {}
        for period in sma_periods:
            indicators[f"sma_{period}"] = SMA(period)
        for period in ema_periods:
            indicators[f"ema_{period}"] = EMA(period)
        fast, slow, signal = MACD_PERIODS
        indicators["rsi"] = RSI(RSI_PERIOD)
        indicators["macd"] = MACD(fast, slow, signal)
        indicators["bollinger"] = BollingerBands(BOLLINGER_PERIOD, BOLLINGER_STD)
        indicators["obv"] = OBV(OBV_CHANGE_LOOKBACK)
        indicators["atr"] = ATR(ATR_PERIOD)
        indicators["support_resistance"] = SupportResistance()
        return indicators

    def compute(self, series: Series) -> List[IndicatorResult]:
        """
        Compute the indicator catalogue over ``series`` in a single forward pass.

        Results come in fixed order: SMA, EMA, RSI, MACD, Bollinger Bands, OBV,
        ATR, Support/Resistance. An indicator whose minimum history is not met
        is left out instead of raising.
        """
        length = len(series)
        indicators = self._build_indicators(length)
        for candle in series:
            for indicator in indicators.values():
                indicator.update(candle)

        price = series.last_close
        builders = (
            ('moving_average', self._sma_result),
            ('moving_average', self._ema_result),
            ('rsi', self._rsi_result),
            ('macd', self._macd_result),
            ('bollinger', self._bollinger_result),
            ('obv', self._obv_result),
            ('atr', self._atr_result),
            ('support_resistance', self._support_resistance_result),
        )

        results: List[IndicatorResult] = []
        for gate, builder in builders:
            if length < MIN_LENGTHS[gate]:
                continue
            result = builder(indicators, price)
            if result is not None:
                results.append(result)

        if self.logger:
            self.logger.debug(f"Calculated {len(results)} technical indicators over {length} candles")
        return results

    def _history(self, indicator: Indicator) -> tuple:
        return indicator.history() if self.trailing_window else ()

    def _ready(self, indicators: Dict[str, Indicator], keys: Sequence[str]) -> bool:
        return all(indicators[key].is_ready for key in keys)

    def _sma_result(self, indicators: Dict[str, Indicator], price: float) -> Optional[SMAResult]:
        keys = [key for key in indicators if key.startswith("sma_")]
        if not self._ready(indicators, keys):
            return None

        values = {int(key[4:]): indicators[key].value for key in keys}
        history = {int(key[4:]): self._history(indicators[key]) for key in keys}
        short_trend = _trend(values[7], values[20])
        long_trend = label = position = None

        if 50 in values and 200 in values:
            sma50, sma200 = values[50], values[200]
            long_trend = _trend(sma50, sma200)
            label = "Golden Cross" if sma50 > sma200 else "Death Cross"
            if price > sma200 and price > sma50:
                position = SMA_PRICE_POSITION_LABELS['above_both']
            elif price > sma200:
                position = SMA_PRICE_POSITION_LABELS['above_200']
            elif price > sma50:
                position = SMA_PRICE_POSITION_LABELS['above_50']
            else:
                position = SMA_PRICE_POSITION_LABELS['below_both']

        return SMAResult(
            values=values,
            history=history,
            short_term_trend=short_trend,
            long_term_trend=long_trend,
            price_position=position,
            label=label,
        )

    def _ema_result(self, indicators: Dict[str, Indicator], price: float) -> Optional[EMAResult]:
        keys = [key for key in indicators if key.startswith("ema_")]
        if not self._ready(indicators, keys):
            return None

        values = {int(key[4:]): indicators[key].value for key in keys}
        history = {int(key[4:]): self._history(indicators[key]) for key in keys}
        short_trend = _trend(values[12], values[26])
        long_trend = cross_alert = None

        if 50 in values and 200 in values:
            ema50, ema200 = values[50], values[200]
            long_trend = _trend(ema50, ema200)
            ratio = safe_div(ema50, ema200)
            bands = self.INDICATOR_THRESHOLDS['ema_cross_ratio']
            if ema50 < ema200 and ratio > bands['golden']:
                cross_alert = "Potential golden cross forming"
            elif ema50 > ema200 and ratio < bands['death']:
                cross_alert = "Potential death cross forming"

        return EMAResult(
            values=values,
            history=history,
            short_term_trend=short_trend,
            long_term_trend=long_trend,
            cross_alert=cross_alert,
            label=short_trend,
        )

    def _rsi_result(self, indicators: Dict[str, Indicator], price: float) -> Optional[RSIResult]:
        rsi = indicators["rsi"]
        if not rsi.is_ready:
            return None
        thresholds = self.INDICATOR_THRESHOLDS['rsi']
        if rsi.value > thresholds['overbought']:
            label = RSI_LABELS['overbought']
        elif rsi.value < thresholds['oversold']:
            label = RSI_LABELS['oversold']
        else:
            label = RSI_LABELS['neutral']
        return RSIResult(period=RSI_PERIOD, value=rsi.value, history=self._history(rsi), label=label)

    def _macd_result(self, indicators: Dict[str, Indicator], price: float) -> Optional[MACDResult]:
        macd: MACD = indicators["macd"]  # type: ignore[assignment]
        if not macd.is_ready:
            return None

        previous, current = macd.previous_histogram, macd.histogram
        crossover = None
        if math.isfinite(previous):
            if previous <= 0 < current:
                crossover = "Bullish Crossover"
            elif previous >= 0 > current:
                crossover = "Bearish Crossover"

        if macd.macd > macd.signal:
            label = "Bullish"
            strength = MACD_STRENGTH_LABELS[
                'strong_bullish' if macd.macd > 0 and macd.signal > 0 else 'weak_bullish'
            ]
        else:
            label = "Bearish"
            strength = MACD_STRENGTH_LABELS[
                'strong_bearish' if macd.macd < 0 and macd.signal < 0 else 'weak_bearish'
            ]

        return MACDResult(
            macd=macd.macd,
            signal=macd.signal,
            histogram=macd.histogram,
            history=self._history(macd),
            crossover=crossover,
            strength=strength,
            label=label,
        )

    def _bollinger_result(self, indicators: Dict[str, Indicator], price: float) -> Optional[BollingerBandsResult]:
        bb: BollingerBands = indicators["bollinger"]  # type: ignore[assignment]
        if not bb.is_ready:
            return None
        position = safe_div(price - bb.lower, bb.upper - bb.lower) * 100.0
        if price > bb.upper:
            label = BOLLINGER_LABELS['above']
        elif price < bb.lower:
            label = BOLLINGER_LABELS['below']
        else:
            label = BOLLINGER_LABELS['inside']
        return BollingerBandsResult(
            upper=bb.upper,
            middle=bb.middle,
            lower=bb.lower,
            position_pct=position,
            history=self._history(bb),
            label=label,
        )

    def _obv_result(self, indicators: Dict[str, Indicator], price: float) -> Optional[OBVResult]:
        obv: OBV = indicators["obv"]  # type: ignore[assignment]
        if not obv.is_ready:
            return None
        change = obv.change_pct
        thresholds = self.INDICATOR_THRESHOLDS['obv_change_pct']
        if change > thresholds['buying']:
            label = OBV_LABELS['buying']
        elif change < thresholds['selling']:
            label = OBV_LABELS['selling']
        else:
            label = OBV_LABELS['neutral']
        return OBVResult(value=obv.value, change_pct=change, history=self._history(obv), label=label)

    def _atr_result(self, indicators: Dict[str, Indicator], price: float) -> Optional[ATRResult]:
        atr = indicators["atr"]
        if not atr.is_ready:
            return None
        percent = safe_div(atr.value, price) * 100.0
        thresholds = self.INDICATOR_THRESHOLDS['atr_pct']
        if percent > thresholds['high']:
            label = ATR_LABELS['high']
        elif percent > thresholds['medium']:
            label = ATR_LABELS['medium']
        else:
            label = ATR_LABELS['low']
        return ATRResult(
            period=ATR_PERIOD,
            value=atr.value,
            percent_of_price=percent,
            history=self._history(atr),
            label=label,
        )

    @staticmethod
    def _support_resistance_result(indicators: Dict[str, Indicator], price: float) -> Optional[SupportResistanceResult]:
        levels: SupportResistance = indicators["support_resistance"]  # type: ignore[assignment]
        if not levels.is_ready:
            return None
        return SupportResistanceResult(support=levels.support, resistance=levels.resistance)

    def summarize(self, series: Series) -> Optional[SummaryStatistics]:
        """Whole-period statistics of ``series``; None when it is empty."""
        if not series:
            return None

        closes = series.closes
        first_close = float(closes[0])
        last_close = float(closes[-1])
        period_low, period_high = range_numba(series.lows, series.highs)
        change = last_close - first_close

        return SummaryStatistics(
            count=len(series),
            first_open_time=int(series.open_times[0]),
            last_open_time=int(series.open_times[-1]),
            last_close=last_close,
            period_high=float(period_high),
            period_low=float(period_low),
            change=change,
            change_pct=safe_div(change, first_close) * 100.0,
            mean_close=float(mean_numba(closes)),
            mean_volume=float(mean_numba(series.volumes)),
            total_volume=float(sum_numba(series.volumes)),
            returns_stdev_pct=float(stdev_numba(pct_returns_numba(closes))),
        )
