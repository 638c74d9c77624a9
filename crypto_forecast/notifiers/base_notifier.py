"""
Base Notifier - Abstract base class for delivering the final analysis text.
Subclasses implement delivery for their specific output medium.
"""
from abc import ABC, abstractmethod
from typing import Optional

from crypto_forecast.contracts.config import ConfigProtocol
from crypto_forecast.logger.logger import Logger
from crypto_forecast.utils.format_utils import FormatUtils


class BaseNotifier(ABC):
    """Abstract base class for notifiers."""

    def __init__(self, logger: Logger, config: ConfigProtocol, formatter: Optional[FormatUtils] = None) -> None:
        self.logger = logger
        self.config = config
        self.formatter = formatter or FormatUtils()

    async def __aenter__(self):
        await self.start()
        return self

    async def __aexit__(self, _exc_type, _exc_val, _exc_tb):
        await self.close()

    @abstractmethod
    async def start(self) -> None:
        """Start the notifier service."""

    @abstractmethod
    async def send(self, text: str) -> None:
        """Deliver the analysis text."""

    async def close(self) -> None:
        """Release any resources held by the notifier."""

    def build_title(self) -> str:
        """Dated title line for the delivered analysis."""
        return f"{self.config.SYMBOL} Trading Analysis - {self.formatter.format_current_time()}"
