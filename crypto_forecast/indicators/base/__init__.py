from .indicator_base import Indicator, TrailingWindow, TRAILING_WINDOW_SIZE, safe_div

__all__ = [
    'Indicator',
    'TrailingWindow',
    'TRAILING_WINDOW_SIZE',
    'safe_div',
]
