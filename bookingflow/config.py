"""
Centralized configuration with environment variable overrides.

Tariffs live in ``bookingflow.pricing.rates`` because they are part of the
pricing contract; this module only carries deployment settings such as
logging, the HTTP bind address and the quote cache size.
"""

import logging
import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)


def _safe_int(env_var: str, default: str) -> int:
    """Parse an integer from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return int(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid integer for {env_var}: {raw!r}"
        ) from None


def _safe_list(env_var: str, default: str) -> tuple[str, ...]:
    """Parse a comma separated env var into a tuple of non-empty strings."""
    raw = os.getenv(env_var, default)
    return tuple(item.strip() for item in raw.split(",") if item.strip())


@dataclass(frozen=True)
class PricingConfig:
    """Quote presentation and caching settings."""

    currency_symbol: str = os.getenv("CURRENCY_SYMBOL", "R")
    quote_cache_size: int = _safe_int("QUOTE_CACHE_SIZE", "512")


@dataclass(frozen=True)
class ApiConfig:
    """HTTP adapter settings."""

    host: str = os.getenv("API_HOST", "127.0.0.1")
    port: int = _safe_int("API_PORT", "8000")
    cors_origins: tuple[str, ...] = _safe_list("CORS_ORIGINS", "http://localhost:5173")


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    pricing: PricingConfig = field(default_factory=PricingConfig)
    api: ApiConfig = field(default_factory=ApiConfig)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    service_name: str = os.getenv("SERVICE_NAME", "bookingflow")


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    if config.pricing.quote_cache_size < 0:
        raise ValueError(
            f"QUOTE_CACHE_SIZE must be >= 0, got {config.pricing.quote_cache_size}"
        )
    if not config.pricing.currency_symbol.strip():
        raise ValueError("CURRENCY_SYMBOL must not be empty")
    if not 1 <= config.api.port <= 65535:
        raise ValueError(f"API_PORT must be between 1 and 65535, got {config.api.port}")
    if config.log_level.upper() not in logging.getLevelNamesMapping():
        raise ValueError(f"LOG_LEVEL is not a known logging level: {config.log_level!r}")


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logger.info("Configuration loaded for '%s'", config.service_name)
    return config


# Singleton instance
settings = load_config()
