"""
Application configuration, read from environment variables.

A .env file in the working directory is loaded first, so local
development does not need exported variables. Connection strings
are never hardcoded beyond the local SQLite default.
"""

import os
from decimal import Decimal
from functools import lru_cache

from dotenv import load_dotenv

# Load .env file into environment variables
load_dotenv()


class Settings:
    """Environment-backed settings for the bookkeeping service."""

    # Application
    APP_NAME: str = "Bookkeeping Core"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"
    # Root level for the bookkeeping loggers, set once in main.
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # Database
    # SQLite works out of the box; any SQLAlchemy URL may be given.
    # Row locks on periods only take effect on a server database.
    DATABASE_URL: str = os.getenv(
        "DATABASE_URL",
        "sqlite:///./bookkeeping.db"
    )

    # Bookkeeping
    # New organizations post statement lines against this account
    # unless they name another flagged bank account.
    DEFAULT_BANK_ACCOUNT_CODE: str = os.getenv(
        "DEFAULT_BANK_ACCOUNT_CODE", "1100"
    )
    # The equity account carries the other side of the bank
    # account's derived opening balance.
    OPENING_BALANCE_EQUITY_CODE: str = os.getenv(
        "OPENING_BALANCE_EQUITY_CODE", "5300"
    )
    # Largest ledger/statement difference still treated as reconciled.
    RECONCILIATION_TOLERANCE: Decimal = Decimal(
        os.getenv("RECONCILIATION_TOLERANCE", "0.00")
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Return the cached settings instance.

    Settings are built once per process, so environment variables
    are read once.
    """
    return Settings()
