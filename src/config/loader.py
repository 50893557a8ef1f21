"""
Configuration loader for CryptoSensei.
Loads private keys from keys.env (overridable through the process environment)
and public configuration from config.ini.
"""

import configparser
import logging
import os
from pathlib import Path
from typing import Any, Dict, List

from dotenv import dotenv_values

# Get the root directory (where keys.env is located) and config directory (where config.ini is located)
ROOT_DIR = Path(__file__).parent.parent.parent.resolve()
CONFIG_DIR = ROOT_DIR / "config"
KEYS_ENV_PATH = ROOT_DIR / "keys.env"
CONFIG_INI_PATH = CONFIG_DIR / "config.ini"

ENV_KEYS = ("COINGECKO_API_KEY", "NEWSDATA_API_KEY")


class Config:
    """Configuration class that loads settings from environment and INI files.

    Implements ConfigProtocol for type safety and dependency injection.
    """

    def __init__(self, keys_env_path: Path = KEYS_ENV_PATH, config_ini_path: Path = CONFIG_INI_PATH):
        self._keys_env_path = Path(keys_env_path)
        self._config_ini_path = Path(config_ini_path)
        self._env_vars = {}
        self._config_data = {}
        self._load_environment()
        self._load_ini_config()
        self._validate_sentiment_weights()

    def _load_environment(self):
        """Load keys.env with python-dotenv, then overlay matching process environment variables."""
        if self._keys_env_path.exists():
            try:
                for key, value in dotenv_values(self._keys_env_path).items():
                    if value is not None:
                        self._env_vars[key] = value
            except Exception as e:
                raise RuntimeError(f"Error loading environment file {self._keys_env_path}: {e}") from e
        else:
            logging.warning(
                "Private keys file not found: %s. Running with keyless provider access.", self._keys_env_path
            )

        for key in ENV_KEYS:
            if os.environ.get(key):
                self._env_vars[key] = os.environ[key]

    def _load_ini_config(self):
        """Load configuration from config.ini file."""
        if not self._config_ini_path.exists():
            raise FileNotFoundError(
                f"Configuration file not found: {self._config_ini_path}. "
                "Please create config.ini in the config directory."
            )

        try:
            parser = configparser.ConfigParser()
            parser.read(self._config_ini_path, encoding='utf-8')

            for section_name in parser.sections():
                section_data = {}
                for key, value in parser.items(section_name):
                    section_data[key] = self._convert_value(value)
                self._config_data[section_name] = section_data
        except Exception as e:
            raise RuntimeError(f"Error loading configuration file {self._config_ini_path}: {e}") from e

    def _validate_sentiment_weights(self):
        """Sentiment sub-score weights must add up to one."""
        weights = self.SENTIMENT_WEIGHTS
        total = sum(weights.values())
        if abs(total - 1.0) > 1e-6:
            error_msg = (
                f"Invalid [sentiment] weights in config.ini: {weights} sum to {total:.3f}, expected 1.0."
            )
            logging.critical(error_msg)
            raise ValueError(error_msg)

    @staticmethod
    def _convert_value(value: str) -> Any:
        """Convert string values to appropriate Python types."""
        if value.lower() in ('true', 'yes', 'on'):
            return True
        elif value.lower() in ('false', 'no', 'off'):
            return False
        if value.isdigit():
            return int(value)
        try:
            if '.' in value:
                return float(value)
        except ValueError:
            pass
        if ',' in value:
            return [item.strip() for item in value.split(',')]
        return value

    def get_env(self, key: str, default: Any = None) -> Any:
        """Get environment variable."""
        return self._env_vars.get(key, default)

    def get_config(self, section: str, key: str, default: Any = None) -> Any:
        """Get configuration value from INI file."""
        return self._config_data.get(section, {}).get(key, default)

    def get_section(self, section: str) -> Dict[str, Any]:
        """Get entire configuration section."""
        return self._config_data.get(section, {})

    # Environment variables (private keys)
    @property
    def COINGECKO_API_KEY(self):
        return self.get_env('COINGECKO_API_KEY')

    @property
    def NEWSDATA_API_KEY(self):
        return self.get_env('NEWSDATA_API_KEY')

    # Provider Configuration
    @property
    def COINGECKO_BASE_URL(self):
        return self.get_config('providers', 'coingecko_base_url', 'https://api.coingecko.com/api/v3')

    @property
    def NEWSDATA_BASE_URL(self):
        return self.get_config('providers', 'newsdata_base_url', 'https://newsdata.io/api/1/news')

    @property
    def REQUEST_TIMEOUT(self):
        return float(self.get_config('providers', 'request_timeout', 15))

    # Rate Limits (seconds between consecutive calls to one provider)
    @property
    def COINGECKO_REQUEST_DELAY(self):
        return float(self.get_config('rate_limits', 'coingecko_request_delay', 6))

    @property
    def NEWSDATA_REQUEST_DELAY(self):
        return float(self.get_config('rate_limits', 'newsdata_request_delay', 12))

    # Cache TTLs (configured in minutes, exposed in seconds)
    @property
    def CACHE_TTLS(self) -> Dict[str, float]:
        return {
            "price": float(self.get_config('cache', 'price_ttl_minutes', 5)) * 60,
            "news": float(self.get_config('cache', 'news_ttl_minutes', 30)) * 60,
            "history": float(self.get_config('cache', 'history_ttl_minutes', 30)) * 60,
        }

    # Analysis Configuration
    @property
    def HISTORY_DAYS(self):
        return int(self.get_config('analysis', 'history_days', 200))

    @property
    def NEWS_LIMIT(self):
        return int(self.get_config('analysis', 'news_limit', 5))

    @property
    def RSI_PERIOD(self):
        return int(self.get_config('analysis', 'rsi_period', 14))

    @property
    def VOLUME_PERIOD(self):
        return int(self.get_config('analysis', 'volume_period', 20))

    @property
    def PRICE_CHANGE_THRESHOLD(self):
        """Absolute 24h change (percent) that flips price sentiment away from Neutral."""
        return float(self.get_config('analysis', 'price_change_threshold', 3.0))

    # Sentiment Configuration
    @property
    def SENTIMENT_WEIGHTS(self) -> Dict[str, float]:
        return {
            "lexical": float(self.get_config('sentiment', 'lexical_weight', 0.2)),
            "contextual": float(self.get_config('sentiment', 'contextual_weight', 0.3)),
            "technical": float(self.get_config('sentiment', 'technical_weight', 0.3)),
            "impact": float(self.get_config('sentiment', 'impact_weight', 0.2)),
        }

    @property
    def SENTIMENT_THRESHOLD(self):
        return float(self.get_config('sentiment', 'label_threshold', 0.2))

    # Dashboard Configuration
    @property
    def DASHBOARD_HOST(self):
        return self.get_config('dashboard', 'host', '127.0.0.1')

    @property
    def DASHBOARD_PORT(self):
        return int(self.get_config('dashboard', 'port', 3001))

    @property
    def DASHBOARD_CORS_ORIGINS(self) -> List[str]:
        origins = self.get_config('dashboard', 'cors_origins', [])
        if isinstance(origins, str):
            return [origins] if origins else []
        return origins

    # General Configuration
    @property
    def LOGGER_DEBUG(self):
        return self.get_config('debug', 'logger_debug', False)

    @property
    def DEFAULT_SYMBOL(self):
        return self.get_config('general', 'default_symbol', 'bitcoin')

    # Directory Configuration
    @property
    def LOG_DIR(self):
        return self.get_config('directories', 'log_dir', 'logs')


config = Config()
