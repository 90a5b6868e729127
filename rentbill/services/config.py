"""Application configuration from environment variables and .env file."""

import logging
from typing import Optional

from pydantic import ConfigDict
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)

# Bill cache entries older than this are served but refreshed in the background
DEFAULT_BILL_CACHE_TTL_SECONDS = 15 * 60


class BillingConfig(BaseSettings):
    """Settings for the API server and the bill client.

    Pydantic automatically loads values from:
    1. OS environment variables (at instantiation time)
    2. .env file (if env_file is set)
    """

    model_config = ConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",  # Allow extra fields in .env file
    )

    database_url: str = "sqlite+aiosqlite:///./rentbill.db"
    log_level: str = "INFO"
    log_file: str = "logs/server.log"

    # HTTP client side (bill cache and coordinators)
    api_base_url: str = "http://localhost:8000"
    http_timeout_seconds: float = 10.0
    bill_cache_ttl_seconds: int = DEFAULT_BILL_CACHE_TTL_SECONDS

    # API server
    host: str = "0.0.0.0"
    port: int = 8000

    def validate(self) -> None:
        """Validate value ranges that pydantic types alone do not cover."""
        if self.bill_cache_ttl_seconds <= 0:
            raise ValueError("BILL_CACHE_TTL_SECONDS must be positive")
        if self.http_timeout_seconds <= 0:
            raise ValueError("HTTP_TIMEOUT_SECONDS must be positive")


def load_config() -> BillingConfig:
    """Build and validate a fresh configuration.

    Raises:
        ValueError: If a configured value is out of range
    """
    config = BillingConfig()
    config.validate()
    return config


# Lazy loader so .env is read after load_dotenv() in main
_config_instance: Optional[BillingConfig] = None


def get_config() -> BillingConfig:
    """Get or create the shared config instance."""
    global _config_instance
    if _config_instance is None:
        _config_instance = load_config()
        logger.debug("Loaded configuration for database %s", _config_instance.database_url)
    return _config_instance


__all__ = [
    "BillingConfig",
    "DEFAULT_BILL_CACHE_TTL_SECONDS",
    "get_config",
    "load_config",
]
