"""
Configuration Management Module

Provides centralized configuration using pydantic-settings for environment-based configuration.
"""

from pathlib import Path
from pydantic_settings import BaseSettings
from typing import Optional


class MiniBankConfig(BaseSettings):
    """MiniBank ledger configuration"""

    # Data files
    data_dir: str = "."
    accounts_file: str = "accounts.csv"
    transactions_file: str = "transactions.csv"

    # Identifier configuration
    first_account_number: int = 1001001000
    first_transaction_id: int = 1

    # Display configuration
    currency_symbol: str = "₹"

    # Logging configuration
    log_level: str = "WARNING"
    log_format: str = "json"  # json or text
    log_file: Optional[str] = None  # If None, logs to stderr

    class Config:
        env_prefix = "MINIBANK_"
        env_file = ".env"
        case_sensitive = False

    @property
    def accounts_path(self) -> Path:
        return Path(self.data_dir) / self.accounts_file

    @property
    def transactions_path(self) -> Path:
        return Path(self.data_dir) / self.transactions_file


# Global configuration instance
config = MiniBankConfig()


def get_config() -> MiniBankConfig:
    """Get global configuration instance"""
    return config


def reload_config() -> MiniBankConfig:
    """Reload configuration from environment"""
    global config
    config = MiniBankConfig()
    return config
