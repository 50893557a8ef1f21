"""Coin id helpers shared by the fetch and sentiment layers."""
from typing import Dict, Tuple

# CoinGecko id -> exchange ticker, for ids whose ticker is not simply the upper-cased id
KNOWN_TICKERS: Dict[str, str] = {
    "bitcoin": "BTC",
    "ethereum": "ETH",
    "solana": "SOL",
    "ripple": "XRP",
    "cardano": "ADA",
    "dogecoin": "DOGE",
    "binancecoin": "BNB",
    "polkadot": "DOT",
    "avalanche-2": "AVAX",
    "chainlink": "LINK",
    "litecoin": "LTC",
    "tron": "TRX",
}

# Extra words that count as a mention of the coin in news text
KNOWN_ALIASES: Dict[str, Tuple[str, ...]] = {
    "bitcoin": ("btc", "bitcoin", "satoshi", "blockchain"),
    "ethereum": ("eth", "ethereum", "vitalik", "smart contracts"),
}


_IDS_BY_TICKER: Dict[str, str] = {ticker.lower(): coin_id for coin_id, ticker in KNOWN_TICKERS.items()}


def normalize_symbol(symbol: str) -> str:
    """Lower-cased coin id; known tickers (``BTC``) resolve to their id (``bitcoin``)."""
    value = symbol.strip().lower()
    return _IDS_BY_TICKER.get(value, value)


def ticker_for(symbol: str) -> str:
    coin_id = normalize_symbol(symbol)
    return KNOWN_TICKERS.get(coin_id, coin_id.upper())


def news_query_for(symbol: str) -> str:
    """Search query used for news, e.g. ``bitcoin OR BTC``."""
    coin_id = normalize_symbol(symbol)
    return f"{coin_id} OR {ticker_for(coin_id)}"
