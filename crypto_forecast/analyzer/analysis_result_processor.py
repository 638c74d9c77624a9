from typing import List, Optional, Sequence

from crypto_forecast.analyzer.data.series import Series
from crypto_forecast.analyzer.dataclasses import IndicatorResult, SentimentPoint
from crypto_forecast.analyzer.formatters.report_formatter import ReportFormatter
from crypto_forecast.logger.logger import Logger

LAST_DATA_POINTS = 3
SUMMARY_LINES_PER_INDICATOR = 3


class AnalysisResultProcessor:
    """Prefixes the model's reply with the data it was based on.

    The final message carries the last candles, a short technical summary and
    the Fear & Greed history ahead of the analysis text, so it can be read
    without the full report.
    """

    def __init__(self, report_formatter: ReportFormatter, logger: Optional[Logger] = None):
        self.report_formatter = report_formatter
        self.logger = logger

    def process(self,
                analysis: str,
                series: Optional[Series],
                indicators: Sequence[IndicatorResult],
                sentiment: Sequence[SentimentPoint]) -> str:
        sections = [
            "=== LAST 3 DATA POINTS ===\n" + self._last_data_points(series),
            "=== TECHNICAL ANALYSIS SUMMARY ===\n" + self._technical_summary(indicators),
            "=== FEAR AND GREED INDEX ===\n" + self._fear_greed(sentiment),
            "=== AI ANALYSIS ===\n" + analysis.strip(),
        ]
        if self.logger:
            self.logger.debug("Combined AI analysis with data summary")
        return "\n\n".join(sections)

    def _last_data_points(self, series: Optional[Series]) -> str:
        if not series:
            return "No data points available."
        candles = self.report_formatter.format_candles(series, LAST_DATA_POINTS).splitlines()
        return "\n".join(candles[-min(LAST_DATA_POINTS, len(series)):])

    def _technical_summary(self, indicators: Sequence[IndicatorResult]) -> str:
        if not indicators:
            return "No technical indicators available."
        blocks: List[str] = []
        for result in indicators:
            lines = [line for line in self.report_formatter.format_indicator(result) if not line.startswith("  ")]
            if not lines:
                continue
            if result.kind == "support_resistance":
                blocks.append("\n".join(lines))
            else:
                blocks.append("\n".join(lines[:SUMMARY_LINES_PER_INDICATOR]))
        return "\n\n".join(blocks)

    def _fear_greed(self, sentiment: Sequence[SentimentPoint]) -> str:
        lines = self.report_formatter.format_fear_greed(sentiment).splitlines()
        return "\n".join(lines[1:])
