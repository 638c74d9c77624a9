"""
Report Formatter.
Renders summary statistics, recent candles, indicator results and the Fear & Greed
history into the single text block handed to the prompt builder.
"""
from typing import Callable, Dict, List, Optional, Sequence

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
    SentimentPoint,
    SummaryStatistics,
    SupportResistanceResult,
)
from crypto_forecast.indicators.constants import MIN_LENGTHS
from crypto_forecast.logger.logger import Logger
from crypto_forecast.utils.format_utils import FormatUtils

INSUFFICIENT_DATA = "Insufficient data"

SUMMARY_HEADER = "=== SUMMARY STATISTICS ==="
CANDLES_HEADER = "=== RECENT CANDLES ==="
INDICATORS_HEADER = "=== TECHNICAL INDICATORS ==="
FEAR_GREED_HEADER = "=== FEAR & GREED INDEX ==="

# (kind, display name, minimum candles) in report order
INDICATOR_CATALOGUE = (
    ("sma", "Simple Moving Averages", MIN_LENGTHS['moving_average']),
    ("ema", "Exponential Moving Averages", MIN_LENGTHS['moving_average']),
    ("rsi", "RSI", MIN_LENGTHS['rsi']),
    ("macd", "MACD (12, 26, 9)", MIN_LENGTHS['macd']),
    ("bollinger", "Bollinger Bands (20, 2)", MIN_LENGTHS['bollinger']),
    ("obv", "On Balance Volume (OBV)", MIN_LENGTHS['obv']),
    ("atr", "Average True Range (ATR)", MIN_LENGTHS['atr']),
    ("support_resistance", "Support/Resistance", MIN_LENGTHS['support_resistance']),
)


class ReportFormatter:
    """Formats the analysis report. Pure: never fetches, never raises."""

    def __init__(self, symbol: str = "BTCUSDT", interval: str = "4h",
                 logger: Optional[Logger] = None, format_utils: Optional[FormatUtils] = None):
        self.symbol = symbol
        self.interval = interval
        self.logger = logger
        self.format_utils = format_utils or FormatUtils()
        self._renderers: Dict[str, Callable[[IndicatorResult], List[str]]] = {
            "sma": self._format_sma,
            "ema": self._format_ema,
            "rsi": self._format_rsi,
            "macd": self._format_macd,
            "bollinger": self._format_bollinger,
            "obv": self._format_obv,
            "atr": self._format_atr,
            "support_resistance": self._format_support_resistance,
        }

    def format_report(self,
                      series: Optional[Series],
                      indicators: Sequence[IndicatorResult],
                      sentiment: Sequence[SentimentPoint],
                      summary: Optional[SummaryStatistics] = None,
                      recent_candles: Optional[int] = None) -> str:
        """Assemble the full report.

        Sections always appear in the same order: summary statistics, recent
        candles, technical indicators, Fear & Greed. A section without data
        renders an "Insufficient data" placeholder.

        Args:
            series: Merged candle series (may be empty or None)
            indicators: Results from TechnicalCalculator.compute
            sentiment: Fear & Greed points, newest first
            summary: Optional whole-period statistics
            recent_candles: How many trailing candles to list; None or 0 lists all
        """
        sections = [
            self._safe(SUMMARY_HEADER, lambda: self.format_summary(summary)),
            self._safe(CANDLES_HEADER, lambda: self.format_candles(series, recent_candles)),
            self._safe(INDICATORS_HEADER, lambda: self.format_indicators(indicators)),
            self._safe(FEAR_GREED_HEADER, lambda: self.format_fear_greed(sentiment)),
        ]
        return "\n\n".join(sections) + "\n"

    def _safe(self, header: str, render: Callable[[], str]) -> str:
        try:
            return render()
        except (TypeError, ValueError, KeyError, AttributeError, IndexError) as e:
            if self.logger:
                self.logger.warning(f"Could not render report section {header}: {e}")
            return f"{header}\n{INSUFFICIENT_DATA}"

    def format_summary(self, summary: Optional[SummaryStatistics]) -> str:
        if summary is None:
            return f"{SUMMARY_HEADER}\n{INSUFFICIENT_DATA}"
        fu = self.format_utils
        lines = [
            SUMMARY_HEADER,
            f"Symbol: {self.symbol} ({self.interval})",
            f"Period: {fu.format_timestamp(summary.first_open_time)} to "
            f"{fu.format_timestamp(summary.last_open_time)} UTC ({summary.count} candles)",
            f"Last Close: {fu.price(summary.last_close)}",
            f"Period High: {fu.price(summary.period_high)}",
            f"Period Low: {fu.price(summary.period_low)}",
            f"Change: {fu.price(summary.change)} ({fu.pct(summary.change_pct, signed=True)})",
            f"Mean Close: {fu.price(summary.mean_close)}",
            f"Mean Volume: {fu.volume(summary.mean_volume)}",
            f"Total Volume: {fu.volume(summary.total_volume)}",
            f"Return Volatility (stdev per candle): {fu.pct(summary.returns_stdev_pct)}",
        ]
        return "\n".join(lines)

    def format_candles(self, series: Optional[Series], recent_candles: Optional[int] = None) -> str:
        if not series:
            return f"{CANDLES_HEADER}\n{INSUFFICIENT_DATA}"
        fu = self.format_utils
        candles = series.tail(recent_candles or 0)
        lines = [
            CANDLES_HEADER,
            f"{self.symbol} historical OHLC + Volume data from Binance "
            f"(last {len(candles)} of {len(series)} candles):",
            "Date: Open, High, Low, Close, Volume",
        ]
        for candle in candles:
            lines.append(
                f"{fu.format_timestamp(candle.open_time)}: O={fu.price(candle.open)} H={fu.price(candle.high)} "
                f"L={fu.price(candle.low)} C={fu.price(candle.close)} V={fu.volume(candle.volume)}"
            )
        return "\n".join(lines)

    def format_indicators(self, indicators: Sequence[IndicatorResult]) -> str:
        if not indicators:
            return f"{INDICATORS_HEADER}\n{INSUFFICIENT_DATA}"

        by_kind: Dict[str, List[IndicatorResult]] = {}
        for result in indicators:
            by_kind.setdefault(result.kind, []).append(result)

        blocks = [INDICATORS_HEADER]
        for kind, name, min_length in INDICATOR_CATALOGUE:
            results = by_kind.pop(kind, [])
            if not results:
                blocks.append(f"\n{name}: {INSUFFICIENT_DATA} (needs at least {min_length} candles)")
                continue
            for result in results:
                blocks.append("\n" + "\n".join(self._renderers[kind](result)))

        # Results of kinds outside the catalogue are still shown
        for results in by_kind.values():
            for result in results:
                blocks.append(f"\n{result.__class__.__name__}: {result.label or ''}".rstrip())
        return "\n".join(blocks)

    def format_indicator(self, result: IndicatorResult) -> List[str]:
        """Lines for one indicator result; empty for kinds without a renderer."""
        renderer = self._renderers.get(result.kind)
        return renderer(result) if renderer else []

    def format_fear_greed(self, sentiment: Sequence[SentimentPoint]) -> str:
        if not sentiment:
            return f"{FEAR_GREED_HEADER}\n{INSUFFICIENT_DATA}"
        lines = [FEAR_GREED_HEADER, "Date: Index classification - Index value"]
        for point in sentiment:
            seconds = point.timestamp_seconds
            date = self.format_utils.format_date_from_timestamp(seconds) if seconds is not None else "N/A"
            lines.append(f"{date}: {point.classification} - {point.value}")
        return "\n".join(lines)

    def _history_line(self, values, render: Callable[[float], str]) -> Optional[str]:
        if not values:
            return None
        return "Last {}: {}".format(len(values), ", ".join(render(v) for v in values))

    def _format_sma(self, result: SMAResult) -> List[str]:
        fu = self.format_utils
        lines = ["Simple Moving Averages:"]
        for period, value in sorted(result.values.items()):
            lines.append(f"SMA ({period}-period): {fu.price(value)}")
            history = self._history_line(result.history.get(period, ()), fu.price)
            if history:
                lines.append(f"  {history}")
        lines.append(f"Short-term Trend: {result.short_term_trend} (7 {'above' if result.short_term_trend == 'Bullish' else 'below'} 20)")
        if result.long_term_trend:
            lines.append(f"Long-term Trend: {result.long_term_trend} ({result.label} active)")
        if result.price_position:
            lines.append(f"Price relative to SMAs: {result.price_position}")
        return lines

    def _format_ema(self, result: EMAResult) -> List[str]:
        fu = self.format_utils
        lines = ["Exponential Moving Averages:"]
        for period, value in sorted(result.values.items()):
            lines.append(f"EMA ({period}-period): {fu.price(value)}")
            history = self._history_line(result.history.get(period, ()), fu.price)
            if history:
                lines.append(f"  {history}")
        lines.append(f"Short-term EMA Trend: {result.short_term_trend} (12 {'above' if result.short_term_trend == 'Bullish' else 'below'} 26)")
        if result.long_term_trend:
            lines.append(f"Long-term EMA Trend: {result.long_term_trend} (50 {'above' if result.long_term_trend == 'Bullish' else 'below'} 200)")
        if result.cross_alert:
            lines.append(f"Alert: {result.cross_alert}")
        return lines

    def _format_rsi(self, result: RSIResult) -> List[str]:
        fu = self.format_utils
        lines = [f"RSI ({result.period}-period): {fu.fmt(result.value)}"]
        history = self._history_line(result.history, fu.fmt)
        if history:
            lines.append(f"  {history}")
        lines.append(f"RSI Indication: {result.label}")
        return lines

    def _format_macd(self, result: MACDResult) -> List[str]:
        fu = self.format_utils
        lines = [
            "MACD (12, 26, 9):",
            f"MACD Line: {fu.fmt(result.macd)}",
            f"Signal Line: {fu.fmt(result.signal)}",
            f"Histogram: {fu.fmt(result.histogram)}",
        ]
        if result.history:
            lines.append(f"  Last {len(result.history)} (MACD/Signal/Histogram): " + ", ".join(
                f"{fu.fmt(m)}/{fu.fmt(s)}/{fu.fmt(h)}" for m, s, h in result.history
            ))
        lines.append(f"MACD Indication: {result.label}")
        if result.crossover:
            lines.append(f"MACD Crossover: {result.crossover}")
        lines.append(f"MACD Strength: {result.strength}")
        return lines

    def _format_bollinger(self, result: BollingerBandsResult) -> List[str]:
        fu = self.format_utils
        lines = [
            "Bollinger Bands (20, 2):",
            f"Upper Band: {fu.price(result.upper)}",
            f"Middle Band (SMA): {fu.price(result.middle)}",
            f"Lower Band: {fu.price(result.lower)}",
        ]
        if result.history:
            lines.append(f"  Last {len(result.history)} (Upper/Middle/Lower): " + ", ".join(
                f"{fu.price(u)}/{fu.price(m)}/{fu.price(lo)}" for u, m, lo in result.history
            ))
        lines.append(f"Price Position: {fu.fmt(result.position_pct, 1)}% of band width from lower band")
        lines.append(f"BB Indication: {result.label}")
        return lines

    def _format_obv(self, result: OBVResult) -> List[str]:
        fu = self.format_utils
        lines = ["On Balance Volume (OBV):", f"Current OBV: {fu.volume(result.value)}"]
        history = self._history_line(result.history, fu.volume)
        if history:
            lines.append(f"  {history}")
        lines.append(f"5-period OBV Change: {fu.pct(result.change_pct)}")
        lines.append(f"OBV Indication: {result.label}")
        return lines

    def _format_atr(self, result: ATRResult) -> List[str]:
        fu = self.format_utils
        lines = ["Average True Range (ATR):", f"{result.period}-period ATR: {fu.price(result.value)}"]
        history = self._history_line(result.history, fu.price)
        if history:
            lines.append(f"  {history}")
        lines.append(f"ATR as % of price: {fu.pct(result.percent_of_price)}")
        lines.append(f"Volatility: {result.label}")
        return lines

    def _format_support_resistance(self, result: SupportResistanceResult) -> List[str]:
        fu = self.format_utils
        return [
            f"Support level: {fu.price(result.support)}",
            f"Resistance level: {fu.price(result.resistance)}",
        ]
