"""
Market data error taxonomy.

Upstream failures are recovered inside the fetch layer (cache fallback or documented
default); these exceptions travel between a provider client and the fetcher, never further.
"""


class MarketDataError(Exception):
    """Base class for all fetch-layer failures."""

    def __init__(self, message: str, provider: str | None = None) -> None:
        super().__init__(message)
        self.provider = provider


class UpstreamUnavailable(MarketDataError):
    """Network or HTTP failure while talking to a provider."""

    def __init__(self, message: str, provider: str | None = None, status: int | None = None) -> None:
        super().__init__(message, provider)
        self.status = status


class InvalidUpstreamShape(UpstreamUnavailable):
    """Provider answered, but required fields are missing or malformed."""


class RateLimitExceeded(MarketDataError):
    """Local limiter window has not elapsed, or the provider answered HTTP 429."""

    def __init__(self, message: str, provider: str | None = None, retry_after: float = 0.0) -> None:
        super().__init__(message, provider)
        self.retry_after = retry_after


class InsufficientData(MarketDataError):
    """Series shorter than an indicator window; values are computed over what is available."""

    def __init__(self, message: str, required: int = 0, available: int = 0) -> None:
        super().__init__(message)
        self.required = required
        self.available = available
