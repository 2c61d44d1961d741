"""
Configuration Management Module

Provides centralized configuration using pydantic-settings for environment-based configuration.
"""

from pydantic_settings import BaseSettings


class MinibankConfig(BaseSettings):
    """Minibank ledger configuration"""

    # Logging configuration
    log_level: str = "INFO"
    log_format: str = "json"  # json or text

    # Business rules configuration
    allow_negative_opening_balance: bool = False  # Permit "debt" accounts at opening
    allow_negative_deposit: bool = False  # Permit deposits below zero
    require_numeric_pin: bool = True  # PIN must be exactly four digits

    # Security configuration
    pin_hash_n: int = 2 ** 14  # scrypt CPU/memory cost for PIN digests

    # Feature flags
    enable_audit_logging: bool = True

    class Config:
        env_prefix = "MINIBANK_"
        env_file = ".env"
        case_sensitive = False


# Global configuration instance
config = MinibankConfig()


def get_config() -> MinibankConfig:
    """Get global configuration instance"""
    return config


def reload_config() -> MinibankConfig:
    """Reload configuration from environment"""
    global config
    config = MinibankConfig()
    return config
