"""
Config Protocol - Interface for configuration management.

Defines the contract for configuration access without requiring the concrete
Config import. Tests and alternative front-ends can satisfy it with any object.
"""

from typing import Any, Dict, Protocol


class ConfigProtocol(Protocol):
    """Protocol defining the configuration members the pipeline reads."""

    # ===== Environment Variables (Private Keys) =====
    @property
    def ANTHROPIC_API_KEY(self) -> str | None: ...

    @property
    def TELEGRAM_API_KEY(self) -> str | None: ...

    @property
    def TELEGRAM_CHAT_ID(self) -> str | None: ...

    # ===== Market Data =====
    @property
    def SYMBOL(self) -> str: ...

    @property
    def INTERVAL(self) -> str: ...

    @property
    def HISTORY_DAYS(self) -> int: ...

    @property
    def PAGE_LIMIT(self) -> int: ...

    @property
    def FEAR_GREED_LIMIT(self) -> int: ...

    @property
    def RECENT_CANDLES(self) -> int: ...

    @property
    def TRAILING_WINDOW(self) -> bool: ...

    @property
    def BINANCE_BASE_URL(self) -> str: ...

    @property
    def BINANCE_FALLBACK_BASE_URL(self) -> str: ...

    @property
    def REQUEST_TIMEOUT(self) -> float: ...

    @property
    def REQUEST_RETRIES(self) -> int: ...

    @property
    def ALTERNATIVE_ME_BASE_URL(self) -> str: ...

    # ===== AI Provider =====
    @property
    def PROVIDER(self) -> str: ...

    @property
    def ANTHROPIC_BASE_URL(self) -> str: ...

    @property
    def MODEL(self) -> str: ...

    @property
    def MAX_TOKENS(self) -> int: ...

    # ===== Delivery =====
    @property
    def OUTPUT(self) -> str: ...

    @property
    def TELEGRAM_BASE_URL(self) -> str: ...

    @property
    def TELEGRAM_MAX_CHUNK_LENGTH(self) -> int: ...

    @property
    def TELEGRAM_CHUNK_DELAY(self) -> float: ...

    # ===== General =====
    @property
    def LOGGER_DEBUG(self) -> bool: ...

    @property
    def LOG_DIR(self) -> str: ...

    # ===== Methods =====
    def get_env(self, key: str, default: Any = None) -> Any: ...

    def get_config(self, section: str, key: str, default: Any = None) -> Any: ...

    def get_section(self, section: str) -> Dict[str, Any]: ...

    def validate_for_run(self, only_prompt: bool = False) -> None: ...
