from .base import Indicator, TrailingWindow
from .momentum import MACD, RSI
from .overlap import EMA, SMA
from .statistical import SupportResistance
from .volatility import ATR, BollingerBands
from .volume import OBV

__all__ = [
    'Indicator',
    'TrailingWindow',
    'SMA',
    'EMA',
    'RSI',
    'MACD',
    'BollingerBands',
    'OBV',
    'ATR',
    'SupportResistance',
]
