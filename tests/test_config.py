"""
Test suite for config module
"""

import pytest

from minibank import config as config_module
from minibank.config import MinibankConfig, get_config, reload_config


class TestConfig:
    """Test environment-driven configuration"""

    def test_defaults(self, monkeypatch):
        """Test safe defaults for the amount and PIN policies"""
        for name in ["MINIBANK_ALLOW_NEGATIVE_DEPOSIT", "MINIBANK_LOG_LEVEL"]:
            monkeypatch.delenv(name, raising=False)

        settings = MinibankConfig()
        assert settings.allow_negative_opening_balance is False
        assert settings.allow_negative_deposit is False
        assert settings.require_numeric_pin is True
        assert settings.enable_audit_logging is True
        assert settings.log_level == "INFO"

    def test_environment_override(self, monkeypatch):
        """Test MINIBANK_ prefixed variables override defaults"""
        monkeypatch.setenv("MINIBANK_ALLOW_NEGATIVE_DEPOSIT", "true")
        monkeypatch.setenv("MINIBANK_LOG_FORMAT", "text")
        monkeypatch.setenv("MINIBANK_PIN_HASH_N", "1024")

        settings = MinibankConfig()
        assert settings.allow_negative_deposit is True
        assert settings.log_format == "text"
        assert settings.pin_hash_n == 1024

    def test_reload_config(self, monkeypatch):
        """Test reload_config replaces the global instance"""
        original = get_config()
        # Restore the global instance at teardown
        monkeypatch.setattr(config_module, "config", original)
        monkeypatch.setenv("MINIBANK_LOG_LEVEL", "DEBUG")

        reloaded = reload_config()
        assert reloaded is get_config()
        assert reloaded is not original
        assert reloaded.log_level == "DEBUG"
