from .alternative_me import AlternativeMeAPI
from .binance import BinanceKlinesAPI

__all__ = ['AlternativeMeAPI', 'BinanceKlinesAPI']
