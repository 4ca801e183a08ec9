"""
Application configuration.

Loads settings from environment variables and .env file.
All configuration is centralized here, no scattered magic strings.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional


class Settings(BaseSettings):
    """Application settings loaded from environment.

    Attributes:
        project_name: Display name for the API.
        version: Current API version string.
        debug: Enable debug mode. Must be False in production.
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR).
        rate_limit_enabled: Apply the default rate limit to every route.
        rate_limit_default: Default rate limit for all endpoints.
        database_url: SQLAlchemy URL of the balance/order store.
            When unset, state is kept in process memory.
        cash_asset: Asset that serves as cash for every trade.
        seed_sample_data: Credit sample balances at startup when the
            balance store is empty.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    project_name: str = "Brokerage Ledger"
    version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"
    rate_limit_enabled: bool = True
    rate_limit_default: str = "60/minute"

    database_url: Optional[str] = None
    cash_asset: str = "TRY"
    seed_sample_data: bool = False

    def uses_database(self) -> bool:
        """Return True when balances and orders live in a SQL database."""
        return bool(self.database_url)


settings = Settings()
