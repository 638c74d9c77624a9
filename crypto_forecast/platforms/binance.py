import asyncio
import json
import math
from typing import Any, List, Optional, Sequence

import aiohttp

from crypto_forecast.analyzer.data.series import FetchResult, Series, merge_candles
from crypto_forecast.analyzer.dataclasses import Candle
from crypto_forecast.contracts.config import ConfigProtocol
from crypto_forecast.exceptions import DecodeError, EmptyResultError, TransportError
from crypto_forecast.logger.logger import Logger
from crypto_forecast.utils.decorators import retry_async
from crypto_forecast.utils.format_utils import format_utc_ms
from crypto_forecast.utils.timeframe_validator import TimeframeValidator

# Kline row layout: [open_time, open, high, low, close, volume, close_time, ...]
OPEN_TIME, OPEN, HIGH, LOW, CLOSE, VOLUME, CLOSE_TIME = range(7)
MIN_ROW_FIELDS = 6


def parse_float(value: Any) -> float:
    """Parse a JSON number or numeric string; anything else becomes 0.0."""
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        result = float(value)
    elif isinstance(value, str):
        try:
            result = float(value.strip())
        except ValueError:
            return 0.0
    else:
        return 0.0
    return result if math.isfinite(result) else 0.0


def parse_kline(row: Sequence[Any]) -> Optional[Candle]:
    """Convert one kline row to a Candle, or None when it has fewer than six fields."""
    if len(row) < MIN_ROW_FIELDS:
        return None
    return Candle(
        open_time=int(parse_float(row[OPEN_TIME])),
        open=parse_float(row[OPEN]),
        high=parse_float(row[HIGH]),
        low=parse_float(row[LOW]),
        close=parse_float(row[CLOSE]),
        volume=parse_float(row[VOLUME]),
    )


def parse_klines(rows: Sequence[Sequence[Any]]) -> List[Candle]:
    candles = []
    for row in rows:
        candle = parse_kline(row)
        if candle is not None:
            candles.append(candle)
    return candles


class BinanceKlinesAPI:
    """
    Paged client for the Binance klines endpoint.

    Pages are requested sequentially: each next page starts one millisecond
    after the close time of the previous page's last candle. The merged result
    is sorted by open time and free of duplicate open times.
    """
    KLINES_PATH = "/api/v3/klines"

    def __init__(
        self,
        logger: Logger,
        symbol: str = "BTCUSDT",
        interval: str = "4h",
        base_url: str = "https://api-gcp.binance.com",
        fallback_base_url: Optional[str] = None,
        timeout: float = 30,
        max_retries: int = 0,
        retry_delay: float = 1.0,
    ) -> None:
        self.logger = logger
        self.symbol = symbol
        self.interval = interval
        self.base_url = base_url.rstrip('/')
        self.fallback_base_url = (fallback_base_url or base_url).rstrip('/')
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.session: Optional[aiohttp.ClientSession] = None

    @classmethod
    def from_config(cls, config: ConfigProtocol, logger: Logger) -> "BinanceKlinesAPI":
        return cls(
            logger=logger,
            symbol=config.SYMBOL,
            interval=config.INTERVAL,
            base_url=config.BINANCE_BASE_URL,
            fallback_base_url=config.BINANCE_FALLBACK_BASE_URL,
            timeout=config.REQUEST_TIMEOUT,
            max_retries=config.REQUEST_RETRIES,
        )

    async def __aenter__(self):
        await self.initialize()
        return self

    async def __aexit__(self, _exc_type, _exc_val, _exc_tb):
        await self.close()

    async def initialize(self) -> None:
        """Open the HTTP session used for every page request."""
        self._ensure_session()

    async def close(self) -> None:
        if self.session and not self.session.closed:
            self.logger.debug(f"Closing {self.__class__.__name__} session")
            await self.session.close()
        self.session = None

    def _ensure_session(self) -> aiohttp.ClientSession:
        if self.session is None or self.session.closed:
            self.session = aiohttp.ClientSession()
        return self.session

    @retry_async()
    async def _request_page(self, base_url: str, start_time: int, end_time: int, limit: int) -> List[List[Any]]:
        session = self._ensure_session()
        params = {
            "symbol": self.symbol,
            "interval": self.interval,
            "startTime": start_time,
            "endTime": end_time,
            "limit": limit,
        }
        url = f"{base_url}{self.KLINES_PATH}"
        timeout = aiohttp.ClientTimeout(total=self.timeout)

        async with session.get(url, params=params, timeout=timeout) as resp:
            if resp.status != 200:
                try:
                    details = await resp.text()
                except aiohttp.ClientError:
                    details = ""
                raise TransportError(
                    f"Klines request failed with status {resp.status}: {details[:200]}",
                    status=resp.status
                )
            try:
                payload = await resp.json(content_type=None)
            except (json.JSONDecodeError, ValueError) as e:
                raise DecodeError(f"Klines response is not valid JSON: {e}") from e

        if not isinstance(payload, list) or not all(isinstance(row, list) for row in payload):
            raise DecodeError(f"Klines response is not an array of arrays: {str(payload)[:200]}")
        return payload

    async def _fetch_page(self, base_url: str, start_time: int, end_time: int, limit: int) -> List[List[Any]]:
        """Request one page; network failures surface as TransportError."""
        try:
            return await self._request_page(base_url, start_time, end_time, limit)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise TransportError(f"Klines request failed: {type(e).__name__} - {e}") from e

    @staticmethod
    def _next_start(page: List[List[Any]]) -> Optional[int]:
        """Close time of the last row plus one millisecond, None if the row has no close time."""
        last_row = page[-1]
        if len(last_row) <= CLOSE_TIME:
            return None
        return int(parse_float(last_row[CLOSE_TIME])) + 1

    async def fetch(self, start_time: int, end_time: int, page_limit: int = 1000,
                    allow_empty: bool = False) -> FetchResult:
        """
        Fetch every candle between ``start_time`` and ``end_time`` (epoch ms).

        Args:
            start_time: Range start in epoch milliseconds
            end_time: Range end in epoch milliseconds
            page_limit: Maximum candles per request
            allow_empty: Return an empty result instead of raising when the first page is empty

        Returns:
            FetchResult with the merged series; ``truncated`` marks a partial fetch

        Raises:
            TransportError: First page failed at the HTTP or network level
            DecodeError: First page payload had an unexpected shape
            EmptyResultError: First page held no candles and ``allow_empty`` is False
        """
        if page_limit <= 0:
            raise ValueError("page_limit must be positive")

        self.logger.info(
            f"Fetching {self.symbol} {self.interval} candles from "
            f"{format_utc_ms(start_time)} to {format_utc_ms(end_time)}"
        )

        first_page = await self._fetch_page(self.base_url, start_time, end_time, page_limit)
        first_candles = parse_klines(first_page)
        self.logger.info(f"Retrieved {len(first_candles)} candles in first request")

        if not first_candles:
            if allow_empty:
                return FetchResult(series=Series(), truncated=False, requests=1)
            raise EmptyResultError(
                f"No {self.symbol} candles between {format_utc_ms(start_time)} and {format_utc_ms(end_time)}"
            )

        pages: List[List[Candle]] = [first_candles]
        request_budget = TimeframeValidator.max_page_requests(start_time, end_time, page_limit, self.interval)
        requests = 1
        truncated = False
        cursor = start_time
        last_page = first_page

        while len(last_page) == page_limit:
            next_start = self._next_start(last_page)
            if next_start is None:
                self.logger.debug("Last candle carries no close time, stopping pagination")
                break
            if next_start >= end_time or next_start <= cursor:
                break
            if request_budget is not None and requests >= request_budget:
                self.logger.warning(
                    f"Stopping pagination after {requests} requests (budget {request_budget}); result is truncated"
                )
                truncated = True
                break

            cursor = next_start
            requests += 1
            try:
                page = await self._fetch_page(self.fallback_base_url, cursor, end_time, page_limit)
            except (TransportError, DecodeError) as e:
                self.logger.warning(f"Pagination request {requests - 1} failed, keeping partial result: {e}")
                truncated = True
                break

            self.logger.info(f"Pagination request {requests - 1}: Retrieved {len(page)} additional candles")
            if not page:
                break
            pages.append(parse_klines(page))
            last_page = page

        series = merge_candles(pages)
        if series:
            self.logger.info(
                f"Data retrieved from {format_utc_ms(series[0].open_time)} to "
                f"{format_utc_ms(series[-1].open_time)} - total candles: {len(series)}"
            )
        return FetchResult(series=series, truncated=truncated, requests=requests)
