from crypto_forecast.contracts.config import ConfigProtocol
from crypto_forecast.logger.logger import Logger

from .base_notifier import BaseNotifier
from .console_notifier import ConsoleNotifier
from .telegram_notifier import TelegramNotifier, split_message


def create_notifier(config: ConfigProtocol, logger: Logger) -> BaseNotifier:
    """Build the notifier selected by ``[general] output``."""
    if config.OUTPUT == "telegram":
        return TelegramNotifier(logger, config)
    return ConsoleNotifier(logger, config)


__all__ = [
    'BaseNotifier',
    'ConsoleNotifier',
    'TelegramNotifier',
    'create_notifier',
    'split_message',
]
