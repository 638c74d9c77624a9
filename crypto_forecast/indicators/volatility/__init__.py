from .volatility_indicators import ATR, BollingerBands

__all__ = ['ATR', 'BollingerBands']
