"""
Tests for PromptBuilder and AnalysisResultProcessor.
"""
import pytest

from builders import make_series, wave_closes
from crypto_forecast.analyzer.analysis_result_processor import AnalysisResultProcessor
from crypto_forecast.analyzer.calculations.technical_calculator import TechnicalCalculator
from crypto_forecast.analyzer.data.series import Series
from crypto_forecast.analyzer.dataclasses import SentimentPoint
from crypto_forecast.analyzer.formatters.report_formatter import ReportFormatter
from crypto_forecast.analyzer.prompts.prompt_builder import PromptBuilder, base_asset

SENTIMENT = [SentimentPoint(timestamp="1710201600", value="72", classification="Greed")]


@pytest.mark.parametrize("symbol, asset", [
    ("BTCUSDT", "BTC"),
    ("ethusdc", "ETH"),
    ("SOLFDUSD", "SOL"),
    ("ETHBTC", "ETH"),
    ("BTC", "BTC"),
])
def test_base_asset(symbol, asset):
    assert base_asset(symbol) == asset


class TestPromptBuilder:

    def test_report_embedded_in_historical_data(self, mock_logger):
        prompt = PromptBuilder("BTCUSDT", mock_logger).build("=== SUMMARY STATISTICS ===\nLast Close: $1.00\n")
        assert "<historical_data>\n=== SUMMARY STATISTICS ===\nLast Close: $1.00\n</historical_data>" in prompt
        assert prompt.startswith("You are a cryptocurrency market analyst specializing in BTC.")
        assert "<market_analysis>" in prompt
        mock_logger.debug.assert_called_once()

    def test_asset_follows_symbol(self):
        prompt = PromptBuilder("ETHUSDT").build("report")
        assert "specializing in ETH" in prompt
        assert "Buy, Sell, or Hold ETH" in prompt

    def test_braces_in_report_survive(self):
        prompt = PromptBuilder().build("weird {payload}")
        assert "weird {payload}" in prompt


class TestAnalysisResultProcessor:

    @pytest.fixture
    def processor(self, mock_logger):
        return AnalysisResultProcessor(ReportFormatter("BTCUSDT", "4h"), mock_logger)

    def test_sections_and_analysis(self, processor):
        series = make_series(wave_closes(60))
        indicators = TechnicalCalculator().compute(series)

        text = processor.process("  Hold for now.\n", series, indicators, SENTIMENT)

        headers = ["=== LAST 3 DATA POINTS ===", "=== TECHNICAL ANALYSIS SUMMARY ===",
                   "=== FEAR AND GREED INDEX ===", "=== AI ANALYSIS ==="]
        positions = [text.index(h) for h in headers]
        assert positions == sorted(positions)
        assert text.endswith("=== AI ANALYSIS ===\nHold for now.")
        assert "2024-03-12: Greed - 72" in text

    def test_last_data_points_are_candle_lines(self, processor):
        series = make_series([10.0, 11.0, 12.0, 13.0, 14.0])
        text = processor.process("x", series, [], [])
        block = text.split("\n\n")[0].splitlines()
        assert len(block) == 4
        assert all(" O=$" in line for line in block[1:])
        assert block[-1].endswith("C=$14.00 V=100.00")

    def test_short_series(self, processor):
        text = processor.process("x", make_series([10.0]), [], [])
        assert len(text.split("\n\n")[0].splitlines()) == 2

    def test_summary_keeps_headline_lines(self, processor):
        indicators = TechnicalCalculator().compute(make_series(wave_closes(60)))
        text = processor.process("x", Series(), indicators, [])
        summary = text.split("=== TECHNICAL ANALYSIS SUMMARY ===\n")[1].split("\n\n=== FEAR")[0]
        assert "  Last 5" not in summary
        assert "Support level:" in summary and "Resistance level:" in summary
        assert "RSI Indication:" in summary

    def test_placeholders(self, processor):
        text = processor.process("x", Series(), [], [])
        assert "No data points available." in text
        assert "No technical indicators available." in text
