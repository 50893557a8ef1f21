"""
NewsData.io API Client
Handles direct API interactions with the NewsData news search service.
"""
from typing import Any, Dict, Optional

from src.logger.logger import Logger
from src.platforms.base_client import BaseApiClient
from src.platforms.errors import InvalidUpstreamShape, UpstreamUnavailable


class NewsDataAPI(BaseApiClient):
    """News provider backed by newsdata.io."""

    name = "newsdata"

    def __init__(
        self,
        logger: Logger,
        api_key: Optional[str],
        base_url: str = "https://newsdata.io/api/1/news",
        timeout: float = 10.0,
        language: str = "en",
    ) -> None:
        super().__init__(base_url=base_url, logger=logger, api_key=api_key, timeout=timeout)
        self.language = language

    async def fetch_news(self, query: str, size: int, page: Optional[str] = None) -> Dict[str, Any]:
        """
        Search recent news.

        Args:
            query: Free-text query, e.g. ``bitcoin OR BTC``
            size: Number of results requested
            page: Provider page token from a previous response's ``nextPage``

        Returns:
            ``{status, results, nextPage}``
        """
        if not self.api_key:
            raise UpstreamUnavailable("NEWSDATA_API_KEY is not configured", provider=self.name)

        params = {"apikey": self.api_key, "q": query, "language": self.language, "size": size}
        if page:
            params["page"] = page
        payload = await self._get_json(self.base_url, params=params)

        if payload.get("status") != "success":
            raise InvalidUpstreamShape(
                f"Invalid response from NewsData API: status={payload.get('status')!r}", provider=self.name
            )
        if not isinstance(payload.get("results"), list):
            raise InvalidUpstreamShape("NewsData response has no results list", provider=self.name)

        self.logger.debug(f"Fetched {len(payload['results'])} news results for query '{query}'")
        return payload
