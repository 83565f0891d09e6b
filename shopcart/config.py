"""Environment-driven settings for the cart store and its adapters."""
import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from shopcart.logging import get_logger

logger = get_logger(__name__)

DEFAULT_INVENTORY_API_URL = "http://localhost:3333"
DEFAULT_CART_STORAGE_KEY = "@RocketShoes:cart"


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"Invalid {name}={raw!r}, using {default}")
        return default


def _env_int(name: str, default: Optional[int]) -> Optional[int]:
    raw = os.environ.get(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Invalid {name}={raw!r}, using {default}")
        return default


@dataclass(frozen=True)
class Settings:
    """Runtime settings. Build with `get_settings()` or directly in tests."""

    inventory_api_url: str = DEFAULT_INVENTORY_API_URL
    inventory_timeout: float = 10.0
    inventory_retry_attempts: int = 3
    cart_storage_key: str = DEFAULT_CART_STORAGE_KEY
    cart_ttl_seconds: Optional[int] = None  # None = never expire
    language: str = "en"
    redis_url: str = ""
    redis_token: str = ""

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            inventory_api_url=os.environ.get("INVENTORY_API_URL", DEFAULT_INVENTORY_API_URL).rstrip("/"),
            inventory_timeout=_env_float("INVENTORY_TIMEOUT", 10.0),
            inventory_retry_attempts=max(1, _env_int("INVENTORY_RETRY_ATTEMPTS", 3) or 1),
            cart_storage_key=os.environ.get("CART_STORAGE_KEY", DEFAULT_CART_STORAGE_KEY),
            cart_ttl_seconds=_env_int("CART_TTL_SECONDS", None),
            language=os.environ.get("CART_LANGUAGE", "en"),
            redis_url=os.environ.get("UPSTASH_REDIS_REST_URL", ""),
            redis_token=os.environ.get("UPSTASH_REDIS_REST_TOKEN", ""),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get settings singleton (read from the environment once)."""
    return Settings.from_env()
