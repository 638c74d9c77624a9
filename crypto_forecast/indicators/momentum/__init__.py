from .momentum_indicators import MACD, RSI

__all__ = ['MACD', 'RSI']
