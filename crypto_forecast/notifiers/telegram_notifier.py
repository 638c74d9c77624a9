"""
Telegram Notifier - Posts the analysis to a Telegram chat via the Bot API.

Telegram caps messages at 4096 characters, so the text is sent as a dated
header followed by size-bounded chunks with a short pause between them.
A message Telegram refuses is resent once without Markdown, then skipped.
"""
import asyncio
from typing import List, Optional

import aiohttp

from crypto_forecast.contracts.config import ConfigProtocol
from crypto_forecast.exceptions import ConfigError, TransportError
from crypto_forecast.logger.logger import Logger
from crypto_forecast.utils.format_utils import FormatUtils

from .base_notifier import BaseNotifier

MIN_NEWLINE_BREAK = 100


def split_message(text: str, max_len: int = 3900) -> List[str]:
    """Split ``text`` into chunks of at most ``max_len`` characters.

    A chunk ends just before the last newline inside the window when that
    newline sits more than 100 characters into it; otherwise the window is cut
    at ``max_len``. Joining the chunks gives back ``text``.
    """
    if max_len <= 0:
        raise ValueError("max_len must be positive")

    chunks = []
    position = 0
    total = len(text)
    while position < total:
        remaining = total - position
        if remaining < max_len:
            size = remaining
        else:
            window = text[position:position + max_len]
            last_newline = window.rfind("\n")
            size = last_newline if last_newline > MIN_NEWLINE_BREAK else max_len
        chunks.append(text[position:position + size])
        position += size
    return chunks


class TelegramNotifier(BaseNotifier):
    """Sends the analysis through the Telegram Bot API."""

    def __init__(self, logger: Logger, config: ConfigProtocol, formatter: Optional[FormatUtils] = None) -> None:
        super().__init__(logger, config, formatter)
        self.api_key = config.TELEGRAM_API_KEY
        self.chat_id = config.TELEGRAM_CHAT_ID
        self.base_url = config.TELEGRAM_BASE_URL
        self.max_chunk_length = config.TELEGRAM_MAX_CHUNK_LENGTH
        self.chunk_delay = config.TELEGRAM_CHUNK_DELAY
        self.session: Optional[aiohttp.ClientSession] = None

    async def start(self) -> None:
        if not self.api_key or not self.chat_id:
            raise ConfigError("TELEGRAM_API_KEY and TELEGRAM_CHAT_ID must be set for telegram output")
        if self.session is None or self.session.closed:
            self.session = aiohttp.ClientSession()

    async def close(self) -> None:
        if self.session and not self.session.closed:
            self.logger.debug("Closing TelegramNotifier session")
            await self.session.close()
        self.session = None

    async def _post_message(self, text: str, parse_mode: Optional[str] = "Markdown") -> None:
        if self.session is None or self.session.closed:
            await self.start()

        url = f"{self.base_url}/bot{self.api_key}/sendMessage"
        payload = {"chat_id": self.chat_id, "text": text}
        if parse_mode:
            payload["parse_mode"] = parse_mode
        try:
            async with self.session.post(url, json=payload) as resp:
                if resp.status != 200:
                    details = await resp.text()
                    raise TransportError(
                        f"Telegram sendMessage failed with status {resp.status}: {details[:200]}",
                        status=resp.status
                    )
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise TransportError(f"Telegram request failed: {type(e).__name__} - {e}") from e

    async def _deliver(self, text: str) -> Optional[TransportError]:
        """Post one message; a rejected message is retried once as plain text.

        Returns the final error for a message Telegram refused, or None once
        it is delivered. Network failures propagate.
        """
        try:
            await self._post_message(text)
            return None
        except TransportError as e:
            if e.status is None:
                raise
            self.logger.warning(f"Telegram rejected Markdown message, resending as plain text: {e}")

        try:
            await self._post_message(text, parse_mode=None)
            return None
        except TransportError as e:
            if e.status is None:
                raise
            self.logger.error(f"Telegram message dropped: {e}")
            return e

    async def send(self, text: str) -> None:
        chunks = split_message(text, self.max_chunk_length)
        failures = []

        error = await self._deliver(f"📊 *{self.build_title()}*")
        if error:
            failures.append(error)
        for index, chunk in enumerate(chunks):
            error = await self._deliver(chunk)
            if error:
                failures.append(error)
            if index < len(chunks) - 1:
                await asyncio.sleep(self.chunk_delay)

        total = len(chunks) + 1
        if len(failures) == total:
            raise failures[-1]
        if failures:
            self.logger.warning(f"Analysis sent to Telegram with {len(failures)} of {total} messages dropped")
        else:
            self.logger.info(f"Analysis sent to Telegram successfully ({len(chunks)} messages)")
