"""
Persistent stores for the cart.

CartStore needs only synchronous `get(key)` / `set(key, value)`:
- MemoryStore: in-process dict (tests, throwaway sessions)
- RedisStore: Upstash Redis REST client, optional TTL
"""
from typing import Dict, Optional, Protocol

from upstash_redis import Redis

from shopcart.config import Settings, get_settings
from shopcart.logging import get_logger

logger = get_logger(__name__)


class PersistentStore(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...


class MemoryStore:
    """Dict-backed store."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value


# Singleton instance
_sync_redis_client: Optional[Redis] = None


def get_redis_sync(settings: Optional[Settings] = None) -> Redis:
    """
    Get sync Upstash Redis client (singleton).

    Uses standard Upstash env var names:
    - UPSTASH_REDIS_REST_URL
    - UPSTASH_REDIS_REST_TOKEN
    """
    global _sync_redis_client

    if _sync_redis_client is None:
        settings = settings or get_settings()
        if not settings.redis_url or not settings.redis_token:
            raise ValueError("UPSTASH_REDIS_REST_URL and UPSTASH_REDIS_REST_TOKEN must be set")
        _sync_redis_client = Redis(url=settings.redis_url, token=settings.redis_token)

    return _sync_redis_client


class RedisStore:
    """Upstash Redis store. The client is created lazily on first use."""

    def __init__(
        self,
        client: Optional[Redis] = None,
        ttl_seconds: Optional[int] = None,
        settings: Optional[Settings] = None,
    ):
        self._redis = client
        self.ttl_seconds = ttl_seconds
        self._settings = settings

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "RedisStore":
        settings = settings or get_settings()
        return cls(ttl_seconds=settings.cart_ttl_seconds, settings=settings)

    @property
    def redis(self) -> Redis:
        if self._redis is None:
            self._redis = get_redis_sync(self._settings)
        return self._redis

    def get(self, key: str) -> Optional[str]:
        value = self.redis.get(key)
        if isinstance(value, bytes):
            value = value.decode("utf-8")
        return value

    def set(self, key: str, value: str) -> None:
        if self.ttl_seconds:
            self.redis.set(key, value, ex=self.ttl_seconds)
        else:
            self.redis.set(key, value)
