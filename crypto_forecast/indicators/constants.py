"""
Indicator Constants and Thresholds

Single source of truth for indicator periods and the threshold values used to
label indicator readings in the report.
"""

# Indicator periods and minimum history lengths
SHORT_SMA_PERIODS = (7, 20)
LONG_SMA_PERIODS = (50, 200)
SHORT_EMA_PERIODS = (12, 26)
LONG_EMA_PERIODS = (50, 200)

MIN_LENGTHS = {
    'moving_average': 20,
    'long_moving_average': 200,
    'rsi': 14,
    'macd': 35,
    'bollinger': 20,
    'obv': 2,
    'atr': 14,
    'support_resistance': 1,
}

RSI_PERIOD = 14
MACD_PERIODS = (12, 26, 9)
BOLLINGER_PERIOD = 20
BOLLINGER_STD = 2.0
ATR_PERIOD = 14
OBV_CHANGE_LOOKBACK = 5

# Technical Indicator Thresholds
INDICATOR_THRESHOLDS = {
    'rsi': {
        'oversold': 30,
        'overbought': 70
    },
    'obv_change_pct': {
        'selling': -5.0,
        'buying': 5.0
    },
    'atr_pct': {
        'medium': 3.0,
        'high': 5.0
    },
    # EMA50 / EMA200 ratio bands that flag an approaching cross
    'ema_cross_ratio': {
        'golden': 0.995,
        'death': 1.005
    },
}

RSI_LABELS = {
    'overbought': "Overbought",
    'oversold': "Oversold",
    'neutral': "Neutral",
}

OBV_LABELS = {
    'buying': "Strong buying pressure",
    'selling': "Strong selling pressure",
    'neutral': "Neutral volume pressure",
}

ATR_LABELS = {
    'high': "High",
    'medium': "Medium",
    'low': "Low",
}

BOLLINGER_LABELS = {
    'above': "Potentially overbought",
    'below': "Potentially oversold",
    'inside': "Within normal range",
}

SMA_PRICE_POSITION_LABELS = {
    'above_both': "Strong bullish (Price above both 50 & 200 SMAs)",
    'above_200': "Moderately bullish (Price above 200 SMA but below 50 SMA)",
    'above_50': "Mixed signals (Price above 50 SMA but below 200 SMA)",
    'below_both': "Bearish (Price below both 50 & 200 SMAs)",
}

MACD_STRENGTH_LABELS = {
    'strong_bullish': "Strong bullish momentum (both lines above zero)",
    'weak_bullish': "Potential bullish crossover (below zero)",
    'strong_bearish': "Strong bearish momentum (both lines below zero)",
    'weak_bearish': "Potential bearish crossover (above zero)",
}
