from typing import Any, Dict, Optional

from src.logger.logger import Logger
from src.platforms.base_client import BaseApiClient
from src.platforms.errors import InvalidUpstreamShape


class CoinGeckoAPI(BaseApiClient):
    """CoinGecko client serving spot prices and market charts (price + history provider)."""

    name = "coingecko"

    SIMPLE_PRICE_PATH = "/simple/price"
    MARKET_CHART_PATH_TEMPLATE = "/coins/{coin_id}/market_chart"

    def __init__(
        self,
        logger: Logger,
        base_url: str = "https://api.coingecko.com/api/v3",
        api_key: Optional[str] = None,
        timeout: float = 15.0,
        history_timeout: float = 20.0,
    ) -> None:
        super().__init__(base_url=base_url, logger=logger, api_key=api_key, timeout=timeout)
        self.history_timeout = history_timeout

    def _default_headers(self) -> Dict[str, str]:
        headers = super()._default_headers()
        if self.api_key:
            headers["x-cg-demo-api-key"] = self.api_key
        return headers

    async def fetch_spot_price(self, symbol_id: str) -> Dict[str, Any]:
        """
        Fetch the USD spot price for one coin.

        Returns:
            ``{usd, usd_24h_change, usd_market_cap, last_updated_at}`` for ``symbol_id``
        """
        coin_id = symbol_id.lower()
        params = {
            "ids": coin_id,
            "vs_currencies": "usd",
            "include_24hr_change": "true",
            "include_market_cap": "true",
            "include_last_updated_at": "true",
        }
        payload = await self._get_json(f"{self.base_url}{self.SIMPLE_PRICE_PATH}", params=params)

        coin_data = payload.get(coin_id)
        if not isinstance(coin_data, dict) or coin_data.get("usd") is None:
            raise InvalidUpstreamShape(f"No price data found for {symbol_id}", provider=self.name)
        self.logger.debug(f"Fetched CoinGecko spot price for {coin_id}: ${coin_data['usd']}")
        return coin_data

    async def fetch_market_chart(self, symbol_id: str, days: int, interval: str) -> Dict[str, Any]:
        """
        Fetch historical prices, volumes and market caps.

        Returns:
            ``{prices, total_volumes, market_caps}``, each a list of ``[timestamp_ms, value]``
        """
        url = f"{self.base_url}{self.MARKET_CHART_PATH_TEMPLATE.format(coin_id=symbol_id.lower())}"
        params = {"vs_currency": "usd", "days": str(days)}
        # CoinGecko only accepts an explicit interval of 'daily'; hourly granularity is the default below 90 days
        if interval == "daily":
            params["interval"] = "daily"
        payload = await self._get_json(url, params=params, timeout=self.history_timeout)

        prices = payload.get("prices")
        if not isinstance(prices, list):
            raise InvalidUpstreamShape(f"Market chart for {symbol_id} has no price list", provider=self.name)
        self.logger.debug(
            f"Raw data lengths for {symbol_id} - Prices: {len(prices)}, "
            f"Volumes: {len(payload.get('total_volumes') or [])}, Market Caps: {len(payload.get('market_caps') or [])}"
        )
        return payload
