import asyncio
from typing import Any, Dict, Optional

import aiohttp

from src.logger.logger import Logger
from src.platforms.errors import InvalidUpstreamShape, RateLimitExceeded, UpstreamUnavailable

USER_AGENT = "CryptoSensei-Dashboard/1.0"


class BaseApiClient:
    """Base class for market data API clients.

    Owns one lazily created aiohttp session and turns every transport or status problem
    into one of the fetch-layer exceptions, so the fetcher has a single failure path.
    """

    name = "base"

    def __init__(self, base_url: str, logger: Logger, api_key: Optional[str] = None, timeout: float = 15.0) -> None:
        self.base_url = base_url.rstrip("/")
        self.logger = logger
        self.api_key = api_key
        self.timeout = timeout
        self.session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self):
        self._ensure_session()
        return self

    async def __aexit__(self, _exc_type, _exc_val, _exc_tb):
        await self.close()

    async def close(self) -> None:
        """Close the aiohttp session."""
        if self.session:
            try:
                self.logger.debug(f"Closing {self.__class__.__name__} session")
                await self.session.close()
            except Exception as e:
                self.logger.error(f"Error closing session in {self.__class__.__name__}: {e}")
            finally:
                self.session = None

    def _ensure_session(self) -> aiohttp.ClientSession:
        """Ensure an open session exists and return it."""
        if self.session is None or self.session.closed:
            self.session = aiohttp.ClientSession(headers=self._default_headers())
        return self.session

    def _default_headers(self) -> Dict[str, str]:
        return {"Accept": "application/json", "User-Agent": USER_AGENT}

    async def _get_json(self, url: str, params: Optional[Dict[str, Any]] = None,
                        timeout: Optional[float] = None) -> Dict[str, Any]:
        """GET ``url`` and return the decoded JSON object."""
        session = self._ensure_session()
        client_timeout = aiohttp.ClientTimeout(total=timeout or self.timeout)

        try:
            async with session.get(url, params=params, timeout=client_timeout) as response:
                if response.status == 429:
                    retry_after = _retry_after_seconds(response.headers.get("Retry-After"))
                    raise RateLimitExceeded(
                        f"{self.name} answered 429 Too Many Requests", provider=self.name, retry_after=retry_after
                    )
                if response.status != 200:
                    details = await self._read_error_text(response)
                    raise UpstreamUnavailable(
                        f"{self.name} returned HTTP {response.status}: {details}",
                        provider=self.name, status=response.status
                    )
                try:
                    payload = await response.json()
                except (aiohttp.ContentTypeError, ValueError) as e:
                    raise InvalidUpstreamShape(f"{self.name} returned a non-JSON body: {e}", provider=self.name) from e
        except asyncio.TimeoutError as e:
            raise UpstreamUnavailable(f"Timeout talking to {self.name}", provider=self.name) from e
        except aiohttp.ClientError as e:
            raise UpstreamUnavailable(
                f"Network error talking to {self.name}: {type(e).__name__} - {e}", provider=self.name
            ) from e

        if not isinstance(payload, dict):
            raise InvalidUpstreamShape(
                f"{self.name} returned {type(payload).__name__}, expected an object", provider=self.name
            )
        return payload

    async def _read_error_text(self, response: aiohttp.ClientResponse) -> str:
        try:
            text = await response.text()
        except (aiohttp.ClientError, UnicodeDecodeError):
            return "Failed to read error response"
        return (text or "No error details available")[:200]


def _retry_after_seconds(value: Optional[str]) -> float:
    if not value:
        return 0.0
    try:
        return max(0.0, float(value))
    except ValueError:
        return 0.0
