"""
Configuration Management Module

Provides centralized configuration using pydantic-settings for environment-based configuration.
"""

from typing import Dict
from pydantic_settings import BaseSettings, SettingsConfigDict


class VendingConfig(BaseSettings):
    """Vending machine backend configuration"""

    model_config = SettingsConfigDict(
        env_prefix="VENDING_",
        env_file=".env",
        case_sensitive=False,
    )

    # Database configuration
    database_url: str = "sqlite:///vending.db"  # memory://, sqlite:///path, postgresql://...

    # API configuration
    api_host: str = "0.0.0.0"
    api_port: int = 8080

    # Logging configuration
    log_level: str = "INFO"
    log_format: str = "json"  # json or text

    # Business rules configuration
    currency_code: str = "THB"  # Amounts are integer minor units of this currency
    default_cancel_reason: str = "Cancelled by customer"

    # Seed data
    seed_on_startup: bool = True
    default_cash_quantities: Dict[int, int] = {
        1: 1000,
        5: 1000,
        10: 1000,
        20: 200,
        50: 200,
        100: 300,
        500: 100,
        1000: 20,
    }
    demo_product_quantity: int = 20


# Global configuration instance
config = VendingConfig()


def get_config() -> VendingConfig:
    """Get global configuration instance"""
    return config


def reload_config() -> VendingConfig:
    """Reload configuration from environment"""
    global config
    config = VendingConfig()
    return config
