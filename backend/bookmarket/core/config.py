"""
Centralized configuration module for application-wide settings.

Every setting is read from the environment once, cached in a module-level
constant and can be logged at startup for visibility.
"""

import logging
import os
from decimal import Decimal, InvalidOperation
from zoneinfo import ZoneInfo

logger = logging.getLogger(__name__)

_TRUTHY = ("true", "1", "yes")


def _get_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in _TRUTHY


def _get_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(
            f"Invalid integer '{raw}' for {name}. Falling back to {default}."
        )
        return default


# ===========================
# Database Configuration
# ===========================


def get_database_url() -> str:
    """
    Get the database URL.

    Environment Variables:
        DATABASE_URL: SQLAlchemy URL
            Default: 'sqlite:///./bookmarket.db'
            Tests: 'sqlite:///:memory:'
    """
    return os.getenv("DATABASE_URL", "sqlite:///./bookmarket.db")


# ===========================
# Timezone Configuration
# ===========================


def get_app_timezone() -> ZoneInfo:
    """
    Get the application timezone from environment variable.

    Returns:
        ZoneInfo: Application timezone (defaults to UTC if not configured)

    Environment Variables:
        TZ: Timezone identifier (e.g., 'America/New_York', 'UTC')
    """
    tz_name = os.getenv("TZ", "UTC")

    try:
        return ZoneInfo(tz_name)
    except Exception as e:
        logger.warning(
            f"Invalid timezone '{tz_name}' specified in TZ environment variable. "
            f"Falling back to UTC. Error: {e}"
        )
        return ZoneInfo("UTC")


APP_TZ = get_app_timezone()


# ===========================
# Marketplace Rules
# ===========================


def get_max_inventory_size() -> int:
    """
    Get the maximum number of distinct book records allowed in inventory.

    Environment Variables:
        MAX_INVENTORY_SIZE: Positive integer
            Default: 100
    """
    size = _get_int("MAX_INVENTORY_SIZE", 100)
    if size <= 0:
        logger.warning(
            f"MAX_INVENTORY_SIZE must be positive, got {size}. Falling back to 100."
        )
        return 100
    return size


def get_depreciation_rate() -> Decimal:
    """
    Get the fraction of the current price lost on every completed transaction.

    Environment Variables:
        DEPRECIATION_RATE: Decimal in the open interval (0, 1)
            Default: '0.10' (10% per transaction)

    Examples:
        >>> # DEPRECIATION_RATE=0.10
        >>> get_depreciation_rate()
        Decimal('0.10')
    """
    raw = os.getenv("DEPRECIATION_RATE", "0.10")
    try:
        rate = Decimal(raw)
    except InvalidOperation:
        logger.warning(f"Invalid DEPRECIATION_RATE '{raw}'. Falling back to 0.10.")
        return Decimal("0.10")

    if not Decimal("0") < rate < Decimal("1"):
        logger.warning(
            f"DEPRECIATION_RATE must be between 0 and 1, got {rate}. "
            "Falling back to 0.10."
        )
        return Decimal("0.10")
    return rate


MAX_INVENTORY_SIZE = get_max_inventory_size()
DEPRECIATION_RATE = get_depreciation_rate()


def log_marketplace_config():
    """Log the active marketplace rules at startup."""
    logger.info(
        "Marketplace configuration initialized",
        extra={
            "context": {
                "max_inventory_size": MAX_INVENTORY_SIZE,
                "depreciation_rate": str(DEPRECIATION_RATE),
                "timezone": str(APP_TZ),
            }
        },
    )


# ===========================
# Logging / Observability
# ===========================


def get_log_level() -> str:
    return os.getenv("LOG_LEVEL", "INFO").upper()


def get_log_json() -> bool:
    """JSON console output (production) instead of colored console output."""
    return _get_bool("LOG_JSON", "false")


def get_log_to_file() -> bool:
    return _get_bool("LOG_TO_FILE", "true")


def get_slow_query_ms() -> int:
    """
    Threshold above which SQL statements are logged as slow.

    Environment Variables:
        SLOW_QUERY_MS: Milliseconds
            Default: 100
    """
    return _get_int("SLOW_QUERY_MS", 100)


# ===========================
# Rate Limiting
# ===========================


def get_rate_limit_enabled() -> bool:
    """
    Whether flask-limiter enforces limits.

    Environment Variables:
        RATE_LIMIT_ENABLED: Default 'true'; tests set '0'
    """
    return _get_bool("RATE_LIMIT_ENABLED", "true")
