from typing import Protocol, Union

from crypto_forecast.contracts.config import ConfigProtocol
from crypto_forecast.logger.logger import Logger

from .anthropic import AnthropicClient
from .base import BaseApiClient
from .mock import MockClient


class CompletionClient(Protocol):
    async def complete(self, prompt: str) -> str: ...

    async def close(self) -> None: ...


def create_completion_client(config: ConfigProtocol, logger: Logger) -> Union[AnthropicClient, MockClient]:
    """Build the completion client selected by ``[ai] provider``."""
    if config.PROVIDER == "mock":
        return MockClient(logger=logger)
    return AnthropicClient.from_config(config, logger)


__all__ = [
    'AnthropicClient',
    'BaseApiClient',
    'CompletionClient',
    'MockClient',
    'create_completion_client',
]
