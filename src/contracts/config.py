"""
Config Protocol - Interface for configuration management.

Defines the contract for configuration access without requiring concrete Config import.
Components depend on this protocol so tests can hand them a MagicMock or a stub.
"""

from typing import Any, Dict, List, Protocol


class ConfigProtocol(Protocol):
    """Protocol defining the interface for configuration management."""

    # ===== Environment Variables (Private Keys) =====
    @property
    def COINGECKO_API_KEY(self) -> str | None: ...

    @property
    def NEWSDATA_API_KEY(self) -> str | None: ...

    # ===== Provider Configuration =====
    @property
    def COINGECKO_BASE_URL(self) -> str: ...

    @property
    def NEWSDATA_BASE_URL(self) -> str: ...

    @property
    def REQUEST_TIMEOUT(self) -> float: ...

    # ===== Rate Limits & Cache =====
    @property
    def COINGECKO_REQUEST_DELAY(self) -> float: ...

    @property
    def NEWSDATA_REQUEST_DELAY(self) -> float: ...

    @property
    def CACHE_TTLS(self) -> Dict[str, float]: ...

    # ===== Analysis =====
    @property
    def HISTORY_DAYS(self) -> int: ...

    @property
    def NEWS_LIMIT(self) -> int: ...

    @property
    def RSI_PERIOD(self) -> int: ...

    @property
    def VOLUME_PERIOD(self) -> int: ...

    @property
    def PRICE_CHANGE_THRESHOLD(self) -> float: ...

    @property
    def SENTIMENT_WEIGHTS(self) -> Dict[str, float]: ...

    @property
    def SENTIMENT_THRESHOLD(self) -> float: ...

    # ===== Dashboard =====
    @property
    def DASHBOARD_HOST(self) -> str: ...

    @property
    def DASHBOARD_PORT(self) -> int: ...

    @property
    def DASHBOARD_CORS_ORIGINS(self) -> List[str]: ...

    # ===== General =====
    @property
    def LOGGER_DEBUG(self) -> bool: ...

    @property
    def DEFAULT_SYMBOL(self) -> str: ...

    @property
    def LOG_DIR(self) -> str: ...

    # ===== Methods =====
    def get_env(self, key: str, default: Any = None) -> Any: ...

    def get_config(self, section: str, key: str, default: Any = None) -> Any: ...

    def get_section(self, section: str) -> Dict[str, Any]: ...
