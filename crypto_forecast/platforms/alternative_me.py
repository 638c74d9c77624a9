import asyncio
import json
from typing import Any, Dict, List, Optional

import aiohttp

from crypto_forecast.analyzer.dataclasses import SentimentPoint
from crypto_forecast.contracts.config import ConfigProtocol
from crypto_forecast.exceptions import DecodeError, ProviderError, TransportError
from crypto_forecast.logger.logger import Logger
from crypto_forecast.utils.decorators import retry_async


class AlternativeMeAPI:
    """
    API client for Alternative.me services.
    Handles the Fear & Greed Index history, newest entry first.
    """
    FEAR_GREED_PATH = "/fng/"

    def __init__(
        self,
        logger: Logger,
        base_url: str = "https://api.alternative.me",
        timeout: float = 30,
        max_retries: int = 0,
        retry_delay: float = 1.0,
    ) -> None:
        self.logger = logger
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.session: Optional[aiohttp.ClientSession] = None

    @classmethod
    def from_config(cls, config: ConfigProtocol, logger: Logger) -> "AlternativeMeAPI":
        return cls(
            logger=logger,
            base_url=config.ALTERNATIVE_ME_BASE_URL,
            timeout=config.REQUEST_TIMEOUT,
            max_retries=config.REQUEST_RETRIES,
        )

    async def __aenter__(self):
        await self.initialize()
        return self

    async def __aexit__(self, _exc_type, _exc_val, _exc_tb):
        await self.close()

    async def initialize(self) -> None:
        if self.session is None or self.session.closed:
            self.session = aiohttp.ClientSession()

    async def close(self) -> None:
        if self.session and not self.session.closed:
            self.logger.debug("Closing AlternativeMeAPI session")
            await self.session.close()
        self.session = None

    @retry_async()
    async def _request(self, count: int) -> Dict[str, Any]:
        if self.session is None or self.session.closed:
            self.session = aiohttp.ClientSession()

        url = f"{self.base_url}{self.FEAR_GREED_PATH}"
        timeout = aiohttp.ClientTimeout(total=self.timeout)
        async with self.session.get(url, params={"limit": count}, timeout=timeout) as resp:
            if resp.status != 200:
                raise TransportError(
                    f"Fear & Greed API request failed with status {resp.status}", status=resp.status
                )
            try:
                data = await resp.json(content_type=None)
            except (json.JSONDecodeError, ValueError) as e:
                raise DecodeError(f"Fear & Greed response is not valid JSON: {e}") from e

        if not isinstance(data, dict):
            raise DecodeError("Fear & Greed response is not a JSON object")
        return data

    async def fetch(self, count: int = 4) -> List[SentimentPoint]:
        """
        Get the last ``count`` Fear & Greed Index entries.

        Returns:
            SentimentPoint list in provider order (newest first)

        Raises:
            TransportError: HTTP or network failure
            DecodeError: Body carries no ``data`` list
            ProviderError: ``metadata.error`` holds a message
        """
        self.logger.debug(f"Fetching last {count} Fear & Greed Index entries")
        try:
            data = await self._request(count)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise TransportError(f"Fear & Greed request failed: {type(e).__name__} - {e}") from e

        metadata = data.get("metadata") or {}
        error = metadata.get("error") if isinstance(metadata, dict) else None
        if isinstance(error, str) and error.strip():
            raise ProviderError(f"Error fetching Fear & Greed Index: {error}")

        entries = data.get("data")
        if not isinstance(entries, list):
            raise DecodeError("Fear & Greed response has no 'data' list")

        points = []
        for entry in entries:
            if not isinstance(entry, dict):
                raise DecodeError(f"Unexpected Fear & Greed entry: {entry!r}")
            points.append(SentimentPoint(
                timestamp=str(entry.get("timestamp", "")),
                value=str(entry.get("value", "")),
                classification=str(entry.get("value_classification", "Unknown")),
            ))

        if points:
            self.logger.debug(f"Fear & Greed latest: {points[0].value} - {points[0].classification}")
        return points
