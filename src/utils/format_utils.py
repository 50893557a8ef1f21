import math

PRICE_SIGNIFICANT_DIGITS = 6


def round_price(value: float, significant: int = PRICE_SIGNIFICANT_DIGITS) -> float:
    """Round to ``significant`` digits, never to fewer than 2 decimals.

    Keeps sub-cent coins distinguishable: ``round_price(1.96e-05)`` stays ``1.96e-05``.
    """
    if not value or not math.isfinite(value):
        return value
    decimals = max(2, significant - 1 - math.floor(math.log10(abs(value))))
    return round(value, decimals)


def fmt_price(value: float) -> str:
    """Format a price with precision based on its magnitude"""
    try:
        value = float(value)
    except (TypeError, ValueError):
        return "N/A"
    if not math.isfinite(value):
        return "N/A"
    magnitude = abs(value)
    if 0 < magnitude < 0.0000001:
        return f"{value:.4e}"
    elif 0 < magnitude < 0.00001:  # SHIB and similar
        return f"{value:.8f}"
    elif 0 < magnitude < 0.0001:
        return f"{value:.7f}"
    elif 0 < magnitude < 0.001:
        return f"{value:.6f}"
    elif 0 < magnitude < 0.01:
        return f"{value:.5f}"
    elif 0 < magnitude < 10:
        return f"{value:.4f}"
    return f"{value:.2f}"


def fmt_usd(value: float) -> str:
    return f"${fmt_price(value)}"
