from typing import Any, Dict

from crypto_forecast.contracts.config import ConfigProtocol
from crypto_forecast.exceptions import ProviderError
from crypto_forecast.logger.logger import Logger
from crypto_forecast.platforms.ai_providers.base import BaseApiClient

ANTHROPIC_VERSION = "2023-06-01"


class AnthropicClient(BaseApiClient):
    """Client for the Anthropic Messages API."""

    def __init__(self,
                 api_key: str,
                 logger: Logger,
                 base_url: str = "https://api.anthropic.com/v1",
                 model: str = "claude-3-7-sonnet-20250219",
                 max_tokens: int = 4096,
                 timeout: float = 300) -> None:
        super().__init__(api_key, base_url, logger, timeout=timeout)
        self.model = model
        self.max_tokens = max_tokens

    @classmethod
    def from_config(cls, config: ConfigProtocol, logger: Logger) -> "AnthropicClient":
        return cls(
            api_key=config.ANTHROPIC_API_KEY or "",
            logger=logger,
            base_url=config.ANTHROPIC_BASE_URL,
            model=config.MODEL,
            max_tokens=config.MAX_TOKENS,
        )

    def _headers(self) -> Dict[str, str]:
        return {
            "x-api-key": self.api_key,
            "anthropic-version": ANTHROPIC_VERSION,
            "content-type": "application/json",
        }

    def _payload(self, prompt: str) -> Dict[str, Any]:
        return {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "messages": [
                {"role": "user", "content": [{"type": "text", "text": prompt}]}
            ],
        }

    async def complete(self, prompt: str) -> str:
        """
        Send ``prompt`` as a single user message and return the reply text.

        Raises:
            TransportError: HTTP or network failure
            DecodeError: Unparseable response body
            ProviderError: Response carries an error or no text content
        """
        response = await self._make_post_request(
            f"{self.base_url}/messages", self._headers(), self._payload(prompt), self.model
        )

        if response.get("error"):
            error = response["error"]
            message = error.get("message", error) if isinstance(error, dict) else error
            raise ProviderError(f"Anthropic API returned an error: {message}")

        texts = [
            block.get("text", "")
            for block in response.get("content") or []
            if isinstance(block, dict) and block.get("type") == "text"
        ]
        if not texts:
            raise ProviderError("No content in the response")

        usage = response.get("usage") or {}
        if usage:
            self.logger.debug(
                f"Anthropic usage: {usage.get('input_tokens', 0)} input, {usage.get('output_tokens', 0)} output tokens"
            )
        return texts[0]
