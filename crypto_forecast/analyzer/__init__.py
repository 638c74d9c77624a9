"""
Market analysis: candle series, indicator engine, report formatting and prompt building.
"""
