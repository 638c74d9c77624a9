import time
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from crypto_forecast.analyzer.analysis_result_processor import AnalysisResultProcessor
from crypto_forecast.analyzer.calculations.technical_calculator import TechnicalCalculator
from crypto_forecast.analyzer.data.series import FetchResult
from crypto_forecast.analyzer.dataclasses import IndicatorResult, SentimentPoint
from crypto_forecast.analyzer.formatters.report_formatter import ReportFormatter
from crypto_forecast.analyzer.prompts.prompt_builder import PromptBuilder
from crypto_forecast.contracts.config import ConfigProtocol
from crypto_forecast.logger.logger import Logger
from crypto_forecast.notifiers import BaseNotifier, create_notifier
from crypto_forecast.platforms.ai_providers import CompletionClient, create_completion_client
from crypto_forecast.platforms.alternative_me import AlternativeMeAPI
from crypto_forecast.platforms.binance import BinanceKlinesAPI
from crypto_forecast.utils.format_utils import format_utc_ms

DAY_MS = 86_400_000


@dataclass(slots=True)
class PipelineResult:
    """Everything one run produced, in the order it was produced."""
    fetch: FetchResult
    sentiment: List[SentimentPoint]
    indicators: List[IndicatorResult]
    report: str
    prompt: str
    analysis: Optional[str] = None
    warnings: List[str] = field(default_factory=list)


class ForecastPipeline:
    """One-shot pipeline: fetch -> compute -> assemble -> prompt -> complete -> deliver."""

    def __init__(self, logger: Logger, config: ConfigProtocol, only_prompt: bool = False):
        self.logger = logger
        self.config = config
        self.only_prompt = only_prompt
        self.binance_api: Optional[BinanceKlinesAPI] = None
        self.alternative_me_api: Optional[AlternativeMeAPI] = None
        self.completion_client: Optional[CompletionClient] = None
        self.notifier: Optional[BaseNotifier] = None
        self.technical_calculator = TechnicalCalculator(logger=logger, trailing_window=config.TRAILING_WINDOW)
        self.report_formatter = ReportFormatter(config.SYMBOL, config.INTERVAL, logger=logger)
        self.prompt_builder = PromptBuilder(config.SYMBOL, logger=logger)
        self.result_processor = AnalysisResultProcessor(self.report_formatter, logger=logger)

    async def initialize(self) -> None:
        """Create and open the API clients and the notifier."""
        start_time = time.perf_counter()
        self.logger.info("Initializing forecast pipeline...")

        self.binance_api = BinanceKlinesAPI.from_config(self.config, self.logger)
        await self.binance_api.initialize()
        self.alternative_me_api = AlternativeMeAPI.from_config(self.config, self.logger)
        await self.alternative_me_api.initialize()

        if not self.only_prompt:
            self.completion_client = create_completion_client(self.config, self.logger)
            self.notifier = create_notifier(self.config, self.logger)
            await self.notifier.start()

        self.logger.debug(f"Pipeline initialized in {time.perf_counter() - start_time:.2f}s")

    def time_range(self, now_ms: Optional[int] = None) -> Tuple[int, int]:
        """[start, end] in epoch ms covering the configured number of history days."""
        end_time = now_ms if now_ms is not None else int(time.time() * 1000)
        return end_time - self.config.HISTORY_DAYS * DAY_MS, end_time

    async def build_report(self, now_ms: Optional[int] = None) -> PipelineResult:
        """Fetch market data and assemble the report and prompt.

        Fetch errors propagate; nothing is assembled from a failed fetch.
        """
        if self.binance_api is None or self.alternative_me_api is None:
            raise RuntimeError("ForecastPipeline.initialize() must be awaited before build_report()")

        start_time, end_time = self.time_range(now_ms)
        fetch = await self.binance_api.fetch(start_time, end_time, page_limit=self.config.PAGE_LIMIT)
        warnings = []
        if fetch.truncated:
            message = (
                f"Candle history is incomplete: pagination stopped after {fetch.requests} requests, "
                f"last candle {format_utc_ms(fetch.series[-1].open_time) if fetch.series else 'N/A'}"
            )
            self.logger.warning(message)
            warnings.append(message)

        sentiment = await self.alternative_me_api.fetch(self.config.FEAR_GREED_LIMIT)

        self.logger.info(f"Analyzing {len(fetch.series)} {self.config.INTERVAL} candles...")
        indicators = self.technical_calculator.compute(fetch.series)
        summary = self.technical_calculator.summarize(fetch.series)
        report = self.report_formatter.format_report(
            fetch.series,
            indicators,
            sentiment,
            summary=summary,
            recent_candles=self.config.RECENT_CANDLES,
        )
        prompt = self.prompt_builder.build(report)
        return PipelineResult(
            fetch=fetch,
            sentiment=sentiment,
            indicators=indicators,
            report=report,
            prompt=prompt,
            warnings=warnings,
        )

    async def run(self, now_ms: Optional[int] = None) -> PipelineResult:
        result = await self.build_report(now_ms)

        if self.only_prompt:
            print("\n=== PROMPT ===\n")
            print(result.prompt)
            print("\n===============================")
            return result

        self.logger.info("Generating trading recommendations...")
        reply = await self.completion_client.complete(result.prompt)
        result.analysis = self.result_processor.process(
            reply, result.fetch.series, result.indicators, result.sentiment
        )
        await self.notifier.send(result.analysis)
        return result

    async def shutdown(self) -> None:
        self.logger.debug("Shutting down forecast pipeline...")
        for component in (self.binance_api, self.alternative_me_api, self.completion_client, self.notifier):
            if component is not None:
                await component.close()
        self.logger.debug("Shutdown complete")
