import asyncio
import json
from typing import Any, Dict, Optional

import aiohttp

from crypto_forecast.exceptions import DecodeError, TransportError
from crypto_forecast.logger.logger import Logger


class BaseApiClient:
    """Base class for completion API clients with common functionality."""

    ERROR_DETAILS = {
        401: "Authentication error with API key. Check your API key.",
        403: "Permission denied. Your API key may not have access to this model.",
        404: "Model not found or doesn't support this operation.",
        408: "Request timeout. The server took too long to respond.",
        429: "Too many requests. Temporary rate limit.",
        529: "Provider is overloaded. Try again later.",
    }

    def __init__(self, api_key: str, base_url: str, logger: Logger, timeout: float = 300) -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip('/')
        self.logger = logger
        self.timeout = timeout
        self.session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self):
        self._ensure_session()
        return self

    async def __aexit__(self, _exc_type, _exc_val, _exc_tb):
        await self.close()

    async def close(self) -> None:
        """Close the aiohttp session."""
        if self.session and not self.session.closed:
            self.logger.debug(f"Closing {self.__class__.__name__} session")
            await self.session.close()
        self.session = None

    def _ensure_session(self) -> aiohttp.ClientSession:
        """Ensure a session exists and return it."""
        if self.session is None or self.session.closed:
            self.session = aiohttp.ClientSession()
        return self.session

    async def _raise_for_error_response(self, response: aiohttp.ClientResponse, model: str) -> None:
        """Turn a non-200 response into a TransportError carrying the status."""
        try:
            error_text = await response.text()
        except aiohttp.ClientError:
            error_text = "Failed to read error response"

        self.logger.debug(f"API Error for model {model}: Status {response.status} - {error_text}")
        hint = self.ERROR_DETAILS.get(response.status)
        if hint is None and response.status >= 500:
            hint = "Server error. The service may be experiencing issues."
        message = f"{self.__class__.__name__} request failed with status {response.status}"
        if hint:
            message = f"{message}: {hint}"
        raise TransportError(f"{message} {error_text[:300]}".rstrip(), status=response.status)

    async def _make_post_request(self,
                                 url: str,
                                 headers: Dict[str, str],
                                 payload: Dict[str, Any],
                                 model: str) -> Dict[str, Any]:
        """
        Common POST request method with standardized error handling.

        Raises:
            TransportError: Non-200 status or network failure
            DecodeError: Body is not a JSON object
        """
        session = self._ensure_session()
        timeout = aiohttp.ClientTimeout(total=self.timeout)
        self.logger.debug(f"Sending request to {self.__class__.__name__} with model: {model}")

        try:
            async with session.post(url, headers=headers, json=payload, timeout=timeout) as response:
                if response.status != 200:
                    await self._raise_for_error_response(response, model)
                try:
                    response_json = await response.json(content_type=None)
                except (json.JSONDecodeError, ValueError) as e:
                    raise DecodeError(f"{self.__class__.__name__} returned invalid JSON: {e}") from e
        except asyncio.TimeoutError as e:
            raise TransportError(f"Timeout when requesting model {model}") from e
        except aiohttp.ClientError as e:
            raise TransportError(f"Network error when requesting model {model}: {type(e).__name__} - {e}") from e

        if not isinstance(response_json, dict):
            raise DecodeError(f"{self.__class__.__name__} returned a non-object payload")
        self.logger.debug(f"Received successful response for model {model}")
        return response_json
