"""
Tests for Config in crypto_forecast/config/loader.py.
"""
import pytest

from crypto_forecast.config.loader import Config
from crypto_forecast.exceptions import ConfigError


def _write(path, text):
    path.write_text(text, encoding="utf-8")
    return path


@pytest.fixture
def missing(tmp_path):
    return tmp_path / "missing.ini", tmp_path / "missing.env"


class TestDefaults:

    def test_missing_files_use_defaults(self, missing):
        config = Config(*missing)
        assert config.SYMBOL == "BTCUSDT"
        assert config.INTERVAL == "4h"
        assert config.HISTORY_DAYS == 120
        assert config.PAGE_LIMIT == 1000
        assert config.FEAR_GREED_LIMIT == 4
        assert config.OUTPUT == "console"
        assert config.PROVIDER == "anthropic"
        assert config.TRAILING_WINDOW is True
        assert config.BINANCE_BASE_URL == "https://api-gcp.binance.com"
        assert config.BINANCE_FALLBACK_BASE_URL == "https://api.binance.com"
        assert config.ANTHROPIC_API_KEY is None

    def test_shipped_config_is_valid(self):
        config = Config()
        assert config.INTERVAL == "4h"
        assert config.TELEGRAM_MAX_CHUNK_LENGTH == 3900


class TestIniLoading:

    def test_values_are_converted(self, tmp_path):
        ini = _write(tmp_path / "config.ini", (
            "[general]\n"
            "symbol = ethusdt\n"
            "interval = 1d\n"
            "history_days = 30\n"
            "trailing_window = false\n"
            "[binance]\n"
            "base_url = https://example.test/\n"
            "request_timeout = 12.5\n"
            "[telegram]\n"
            "chunk_delay_seconds = 0.25\n"
        ))
        config = Config(ini, tmp_path / "keys.env")

        assert config.SYMBOL == "ETHUSDT"
        assert config.INTERVAL == "1d"
        assert config.HISTORY_DAYS == 30
        assert config.TRAILING_WINDOW is False
        assert config.BINANCE_BASE_URL == "https://example.test"
        assert config.REQUEST_TIMEOUT == 12.5
        assert config.TELEGRAM_CHUNK_DELAY == 0.25
        assert config.get_section("general")["history_days"] == 30

    def test_convert_value(self):
        assert Config._convert_value("yes") is True
        assert Config._convert_value("Off") is False
        assert Config._convert_value("42") == 42
        assert Config._convert_value("0.5") == 0.5
        assert Config._convert_value("1.2.3") == "1.2.3"
        assert Config._convert_value("BTCUSDT") == "BTCUSDT"

    def test_overrides_win_and_none_is_ignored(self, missing):
        config = Config(*missing, overrides={"general": {"symbol": "solusdt", "interval": None, "history_days": 7}})
        assert config.SYMBOL == "SOLUSDT"
        assert config.INTERVAL == "4h"
        assert config.HISTORY_DAYS == 7

    def test_keys_loaded_from_env_file(self, tmp_path):
        keys = _write(tmp_path / "keys.env", "ANTHROPIC_API_KEY= sk-test \nTELEGRAM_API_KEY=\n")
        config = Config(tmp_path / "missing.ini", keys)
        assert config.ANTHROPIC_API_KEY == "sk-test"
        assert config.TELEGRAM_API_KEY is None


class TestValidation:

    @pytest.mark.parametrize("section, values", [
        ("general", {"interval": "2d"}),
        ("general", {"output": "email"}),
        ("general", {"page_limit": 0}),
        ("general", {"history_days": -1}),
        ("ai", {"provider": "openai"}),
    ])
    def test_invalid_values_raise(self, missing, section, values):
        with pytest.raises(ConfigError):
            Config(*missing, overrides={section: values})

    def test_invalid_interval_in_file(self, tmp_path):
        ini = _write(tmp_path / "config.ini", "[general]\ninterval = 7h\n")
        with pytest.raises(ConfigError, match="Unsupported interval"):
            Config(ini, tmp_path / "keys.env")

    def test_anthropic_requires_key(self, missing):
        config = Config(*missing)
        with pytest.raises(ConfigError, match="ANTHROPIC_API_KEY"):
            config.validate_for_run()
        config.validate_for_run(only_prompt=True)

    def test_mock_provider_needs_no_key(self, missing):
        Config(*missing, overrides={"ai": {"provider": "mock"}}).validate_for_run()

    def test_telegram_requires_keys(self, missing):
        config = Config(*missing, overrides={"ai": {"provider": "mock"}, "general": {"output": "telegram"}})
        with pytest.raises(ConfigError, match="TELEGRAM"):
            config.validate_for_run()
