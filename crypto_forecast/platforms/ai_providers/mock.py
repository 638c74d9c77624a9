import re
from typing import Optional

from crypto_forecast.logger.logger import Logger

_LAST_CLOSE_RE = re.compile(r"Last Close:\s*\$([\d,]+(?:\.\d+)?)")
_RSI_RE = re.compile(r"RSI Indication:\s*(\w+)")


class MockClient:
    """Mock completion provider used for local runs without an API key.

    Returns a deterministic analysis built from the last close and RSI label
    found in the prompt, falling back to neutral defaults.
    """

    def __init__(self, logger: Optional[Logger] = None):
        self.logger = logger

    async def __aenter__(self):
        return self

    async def __aexit__(self, _exc_type, _exc_val, _exc_tb):
        await self.close()

    async def close(self) -> None:
        return None

    @staticmethod
    def _extract_last_close(prompt: str) -> Optional[float]:
        match = _LAST_CLOSE_RE.search(prompt)
        if not match:
            return None
        return float(match.group(1).replace(",", ""))

    async def complete(self, prompt: str) -> str:
        last_close = self._extract_last_close(prompt)
        rsi_match = _RSI_RE.search(prompt)
        rsi_label = rsi_match.group(1) if rsi_match else "Neutral"

        if rsi_label == "Oversold":
            recommendation = "Buy"
        elif rsi_label == "Overbought":
            recommendation = "Sell"
        else:
            recommendation = "Hold"

        if last_close is None:
            levels = "Key levels unavailable (no close price in data)."
        else:
            levels = (
                f"Support near ${last_close * 0.95:,.2f}, "
                f"resistance near ${last_close * 1.05:,.2f}."
            )

        if self.logger:
            self.logger.debug(f"MockClient returning canned {recommendation} analysis")

        return (
            "<market_analysis>\n"
            "1. Market Overview: Mock analysis generated without contacting a model.\n"
            f"4. Key Levels: {levels}\n"
            f"5. Indicator Analysis: RSI reads {rsi_label}.\n"
            "6. Risk Assessment: Medium\n"
            f"8. Overall Recommendation: {recommendation}\n"
            "</market_analysis>"
        )
