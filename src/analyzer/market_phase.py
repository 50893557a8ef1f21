from src.analyzer.dataclasses import TrendAssessment

BULL_MARKET = "Bull Market"
BEAR_MARKET = "Bear Market"
CORRECTION = "Correction"
ACCUMULATION = "Accumulation"
DISTRIBUTION = "Distribution"


class MarketPhaseClassifier:
    """Labels the market regime from the price and its moving averages."""

    @staticmethod
    def classify(price: float, ma50: float, ma200: float) -> str:
        above_ma50 = price > ma50
        above_ma200 = price > ma200
        ma50_above_ma200 = ma50 > ma200

        if above_ma50 and above_ma200 and ma50_above_ma200:
            return BULL_MARKET
        if not above_ma50 and not above_ma200 and not ma50_above_ma200:
            return BEAR_MARKET
        if above_ma200 and not above_ma50:
            return CORRECTION
        return ACCUMULATION

    @staticmethod
    def assess_trend(price: float, ma20: float, ma50: float) -> TrendAssessment:
        """Primary direction from price and MA20 against MA50, strength from the distance to MA50."""
        if price > ma50 and ma20 > ma50:
            primary = "bullish"
        elif price < ma50 and ma20 < ma50:
            primary = "bearish"
        else:
            primary = "neutral"

        strength = min(1.0, 2 * abs(price - ma50) / ma50) if ma50 > 0 else 0.0
        return TrendAssessment(primary=primary, strength=strength)

    @staticmethod
    def breakout_potential(price: float, support: float, resistance: float) -> str:
        if price > resistance:
            return "Bullish Breakout Potential"
        if price < support:
            return "Bearish Breakdown Risk"
        return "Range Bound"
