from .series import FetchResult, Series, merge_candles

__all__ = ['FetchResult', 'Series', 'merge_candles']
