from .technical_calculator import TechnicalCalculator

__all__ = ['TechnicalCalculator']
