from .volume_indicators import OBV

__all__ = ['OBV']
