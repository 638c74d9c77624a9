from typing import Optional

from crypto_forecast.logger.logger import Logger

QUOTE_ASSETS = ("USDT", "USDC", "FDUSD", "BUSD", "TUSD", "USD", "EUR", "BTC", "ETH")

ANALYSIS_TEMPLATE = """\
You are a cryptocurrency market analyst specializing in {asset}. Your task is to provide an insightful summary of the {asset} market, including price predictions, buy and sell positions, key levels, risk assessment, and overall recommendations. Use the following data to conduct your analysis:

<historical_data>
{report}
</historical_data>

Analyze the provided data carefully, paying attention to trends, patterns, and signals from various indicators. Consider both technical and sentiment factors in your analysis.

Prepare a comprehensive summary report with the following sections:

1. Market Overview: Provide a brief overview of the current {asset} market situation based on the latest data points.

2. Price Prediction: Offer price predictions for short-term (1-7 days), mid-term (1-3 months), and long-term (6-12 months) horizons. Support your predictions with relevant data and indicator analysis.

3. Buy and Sell Positions: Recommend entry and exit points for short, mid, and long-term traders. Explain the rationale behind each position.

4. Key Levels: Identify and explain important support and resistance levels to watch. Provide specific price points and reasons why these levels are significant.

5. Indicator Analysis: Analyze each of the following indicators and explain their implications for {asset}'s price action:
   - RSI (overbought/oversold conditions)
   - MACD (trend strength and momentum)
   - Bollinger Bands (volatility and potential reversals)
   - SMA and EMA crossovers (trend direction)
   - OBV (volume confirmation of trends)
   - ATR (volatility measurement)
   - Fear and Greed Index (market sentiment)

6. Risk Assessment: Evaluate the overall risk level (low, medium, or high) for {asset} investments at this time. Provide a detailed explanation for your assessment, considering both technical and fundamental factors.

7. Timeframe Recommendations: Offer specific recommendations for short-term, medium-term, and long-term investors. Explain how your advice differs for each timeframe and why.

8. Overall Recommendation: Conclude with an overall recommendation to Buy, Sell, or Hold {asset}. Justify your recommendation based on the analysis of all indicators and market factors discussed in the report.

Before providing your final output, use <scratchpad> tags to organize your thoughts and analyze the data. This will help you formulate a well-reasoned and comprehensive report.

Present your final analysis and recommendations within <market_analysis> tags. Ensure that your report is well-structured, easy to read, and provides clear, actionable insights for investors with different time horizons."""


def base_asset(symbol: str) -> str:
    """Strip the quote asset from an exchange pair, e.g. BTCUSDT -> BTC."""
    symbol = symbol.upper()
    for quote in QUOTE_ASSETS:
        if symbol.endswith(quote) and len(symbol) > len(quote):
            return symbol[:-len(quote)]
    return symbol


class PromptBuilder:
    """Wraps the market report into the analyst instruction template."""

    def __init__(self, symbol: str = "BTCUSDT", logger: Optional[Logger] = None) -> None:
        self.symbol = symbol
        self.asset = base_asset(symbol)
        self.logger = logger

    def build(self, report: str) -> str:
        prompt = ANALYSIS_TEMPLATE.format(asset=self.asset, report=report.strip())
        if self.logger:
            self.logger.debug(f"Built analysis prompt for {self.symbol} ({len(prompt)} characters)")
        return prompt
