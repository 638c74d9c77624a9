"""
Configuration loader for crypto_forecast.
Loads private keys from keys.env and public configuration from config/config.ini.
"""

import configparser
from pathlib import Path
from typing import Any, Dict, Optional, Union

from dotenv import dotenv_values

from crypto_forecast.exceptions import ConfigError
from crypto_forecast.utils.timeframe_validator import TimeframeValidator

# Root directory (where keys.env lives) and config directory (where config.ini lives)
ROOT_DIR = Path(__file__).parent.parent.parent.resolve()
CONFIG_DIR = ROOT_DIR / "config"
KEYS_ENV_PATH = ROOT_DIR / "keys.env"
CONFIG_INI_PATH = CONFIG_DIR / "config.ini"

VALID_PROVIDERS = {"anthropic", "mock"}
VALID_OUTPUTS = {"console", "telegram"}


class Config:
    """Configuration class that loads settings from environment and INI files.

    Implements ConfigProtocol. A single instance is built at startup and passed
    explicitly to every component that needs settings.
    """

    def __init__(self,
                 config_path: Optional[Union[str, Path]] = None,
                 keys_path: Optional[Union[str, Path]] = None,
                 overrides: Optional[Dict[str, Dict[str, Any]]] = None):
        self.config_path = Path(config_path) if config_path else CONFIG_INI_PATH
        self.keys_path = Path(keys_path) if keys_path else KEYS_ENV_PATH
        self._env_vars: Dict[str, Any] = {}
        self._config_data: Dict[str, Dict[str, Any]] = {}
        self._load_environment()
        self._load_ini_config()
        for section, values in (overrides or {}).items():
            self.set_config(section, values)
        self._validate()

    def _load_environment(self):
        """Load private keys from keys.env using python-dotenv. A missing file means no keys."""
        if not self.keys_path.exists():
            return

        try:
            env_vars = dotenv_values(self.keys_path)
        except Exception as e:
            raise ConfigError(f"Error loading environment file {self.keys_path}: {e}") from e

        for key, value in env_vars.items():
            if value is not None and value.strip():
                self._env_vars[key] = value.strip()

    def _load_ini_config(self):
        """Load configuration from config.ini. A missing file means built-in defaults."""
        if not self.config_path.exists():
            return

        parser = configparser.ConfigParser()
        try:
            parser.read(self.config_path, encoding='utf-8')
        except configparser.Error as e:
            raise ConfigError(f"Error loading configuration file {self.config_path}: {e}") from e

        for section_name in parser.sections():
            self._config_data[section_name] = {
                key: self._convert_value(value) for key, value in parser.items(section_name)
            }

    def _validate(self):
        if not TimeframeValidator.validate(self.INTERVAL):
            raise ConfigError(
                f"Unsupported interval '{self.INTERVAL}' in [general]. "
                f"Supported values are: {', '.join(TimeframeValidator.SUPPORTED_TIMEFRAMES)}."
            )
        if self.PROVIDER not in VALID_PROVIDERS:
            valid_options = ", ".join(f'"{p}"' for p in sorted(VALID_PROVIDERS))
            raise ConfigError(f"Invalid AI provider '{self.PROVIDER}'. Supported values are: {valid_options}.")
        if self.OUTPUT not in VALID_OUTPUTS:
            valid_options = ", ".join(f'"{o}"' for o in sorted(VALID_OUTPUTS))
            raise ConfigError(f"Invalid output '{self.OUTPUT}'. Supported values are: {valid_options}.")
        if self.PAGE_LIMIT <= 0:
            raise ConfigError("`page_limit` in [general] must be a positive integer")
        if self.HISTORY_DAYS <= 0:
            raise ConfigError("`history_days` in [general] must be a positive integer")

    def validate_for_run(self, only_prompt: bool = False) -> None:
        """Check that the secrets needed by the selected provider and output are present."""
        if not only_prompt and self.PROVIDER == "anthropic" and not self.ANTHROPIC_API_KEY:
            raise ConfigError("ANTHROPIC_API_KEY must be set in keys.env when provider is 'anthropic'")
        if self.OUTPUT == "telegram" and not (self.TELEGRAM_API_KEY and self.TELEGRAM_CHAT_ID):
            raise ConfigError("TELEGRAM_API_KEY and TELEGRAM_CHAT_ID must be set in keys.env for telegram output")

    @staticmethod
    def _convert_value(value: str) -> Any:
        """Convert string values to appropriate Python types."""
        lowered = value.lower()
        if lowered in ('true', 'yes', 'on'):
            return True
        if lowered in ('false', 'no', 'off'):
            return False
        if value.isdigit():
            return int(value)
        try:
            if '.' in value:
                return float(value)
        except ValueError:
            pass
        return value

    def get_env(self, key: str, default: Any = None) -> Any:
        """Get a private key loaded from keys.env."""
        return self._env_vars.get(key, default)

    def get_config(self, section: str, key: str, default: Any = None) -> Any:
        """Get configuration value from INI file."""
        return self._config_data.get(section, {}).get(key, default)

    def get_section(self, section: str) -> Dict[str, Any]:
        """Get entire configuration section."""
        return self._config_data.get(section, {})

    def set_config(self, section: str, values: Dict[str, Any]) -> None:
        """Override values of a section (used for command line arguments)."""
        self._config_data.setdefault(section, {}).update(
            {key: value for key, value in values.items() if value is not None}
        )

    # Environment variables (private keys)
    @property
    def ANTHROPIC_API_KEY(self):
        return self.get_env('ANTHROPIC_API_KEY')

    @property
    def TELEGRAM_API_KEY(self):
        return self.get_env('TELEGRAM_API_KEY')

    @property
    def TELEGRAM_CHAT_ID(self):
        return self.get_env('TELEGRAM_CHAT_ID')

    # General Configuration
    @property
    def SYMBOL(self):
        return str(self.get_config('general', 'symbol', 'BTCUSDT')).upper()

    @property
    def INTERVAL(self):
        return str(self.get_config('general', 'interval', '4h'))

    @property
    def HISTORY_DAYS(self):
        return int(self.get_config('general', 'history_days', 120))

    @property
    def PAGE_LIMIT(self):
        return int(self.get_config('general', 'page_limit', 1000))

    @property
    def FEAR_GREED_LIMIT(self):
        return int(self.get_config('general', 'fear_greed_limit', 4))

    @property
    def RECENT_CANDLES(self):
        """Number of raw candles shown in the report; 0 shows the full series."""
        return int(self.get_config('general', 'recent_candles', 10))

    @property
    def OUTPUT(self):
        return str(self.get_config('general', 'output', 'console')).lower()

    @property
    def TRAILING_WINDOW(self):
        return bool(self.get_config('general', 'trailing_window', True))

    # Provider URLs
    @property
    def BINANCE_BASE_URL(self):
        return str(self.get_config('binance', 'base_url', 'https://api-gcp.binance.com')).rstrip('/')

    @property
    def BINANCE_FALLBACK_BASE_URL(self):
        return str(self.get_config('binance', 'fallback_base_url', 'https://api.binance.com')).rstrip('/')

    @property
    def REQUEST_TIMEOUT(self):
        return float(self.get_config('binance', 'request_timeout', 30))

    @property
    def REQUEST_RETRIES(self):
        return int(self.get_config('binance', 'request_retries', 2))

    @property
    def ALTERNATIVE_ME_BASE_URL(self):
        return str(self.get_config('alternative_me', 'base_url', 'https://api.alternative.me')).rstrip('/')

    # AI Provider Configuration
    @property
    def PROVIDER(self):
        return str(self.get_config('ai', 'provider', 'anthropic')).lower()

    @property
    def ANTHROPIC_BASE_URL(self):
        return str(self.get_config('ai', 'anthropic_base_url', 'https://api.anthropic.com/v1')).rstrip('/')

    @property
    def MODEL(self):
        return str(self.get_config('ai', 'model', 'claude-3-7-sonnet-20250219'))

    @property
    def MAX_TOKENS(self):
        return int(self.get_config('ai', 'max_tokens', 4096))

    # Telegram Configuration
    @property
    def TELEGRAM_BASE_URL(self):
        return str(self.get_config('telegram', 'base_url', 'https://api.telegram.org')).rstrip('/')

    @property
    def TELEGRAM_MAX_CHUNK_LENGTH(self):
        return int(self.get_config('telegram', 'max_chunk_length', 3900))

    @property
    def TELEGRAM_CHUNK_DELAY(self):
        return float(self.get_config('telegram', 'chunk_delay_seconds', 0.5))

    # Debug and directories
    @property
    def LOGGER_DEBUG(self):
        return bool(self.get_config('debug', 'logger_debug', False))

    @property
    def LOG_DIR(self):
        return str(self.get_config('directories', 'log_dir', 'logs'))
