from .overlap_indicators import EMA, SMA

__all__ = ['EMA', 'SMA']
