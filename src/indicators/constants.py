"""
Indicator Constants and Thresholds

Single source of truth for all indicator threshold values used across the application.
These values define the standard interpretation levels for technical indicators.
"""

# Default lookback windows
RSI_PERIOD = 14
MACD_FAST = 12
MACD_SLOW = 26
MACD_SIGNAL = 9
VOLUME_PERIOD = 20
OBV_LOOKBACK = 5
MA_PERIODS = (20, 50, 200)

# Technical Indicator Thresholds
# These thresholds are used for interpretation, signal strength and strategy rules
INDICATOR_THRESHOLDS = {
    # Momentum Indicators
    'rsi': {
        'oversold': 30,
        'overbought': 70,
        'bearish': 40,
        'bullish': 60,
    },
    'stoch_rsi': {
        'extremely_oversold': 20,
        'oversold': 40,
        'overbought': 60,
        'extremely_overbought': 80,
    },
    'macd': {
        'strong_histogram_ratio': 0.1,   # |histogram| above this share of |macd| is strong
        'reversal_gap': 0.1,             # |macd - signal| below this flags a possible reversal
        'strong_histogram': 0.1,         # |histogram| above this counts as a strong signal
    },

    # Volume
    'volume_ratio': {
        'very_high': 2.0,
        'high': 1.5,
        'above_average': 1.0,
        'normal': 0.7,
    },

    # Volatility (annualized %)
    'volatility': {
        'high': 50,
    },
}

# Signal strength -> importance label
SIGNAL_IMPORTANCE = {
    'high': 0.7,
    'medium': 0.4,
}
