"""Crypto market forecast: Binance candles, streaming technical indicators and an AI-written analysis."""

__version__ = "0.1.0"
