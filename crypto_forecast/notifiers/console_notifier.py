"""
Console Notifier - Prints the analysis to stdout between banner lines.
"""
from .base_notifier import BaseNotifier

BANNER_WIDTH = 60


class ConsoleNotifier(BaseNotifier):
    """Console-based notifier, the default output."""

    async def start(self) -> None:
        self.logger.debug("ConsoleNotifier: Using console output")

    async def send(self, text: str) -> None:
        print("\n" + "=" * BANNER_WIDTH)
        print(self.build_title().upper())
        print("=" * BANNER_WIDTH + "\n")
        print(text)
        print("\n" + "=" * BANNER_WIDTH)
