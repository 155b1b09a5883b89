"""
Redis-backed JSON cache

Every helper is a no-op when CACHE_ENABLED is off, and cache failures are
logged and treated as misses so requests never fail because Redis is down.
"""
import json
from typing import Any, Callable, Optional

import redis
import structlog

from convertia.core.config import settings

logger = structlog.get_logger()

KEY_NAMESPACE = "convertia"

_client: Optional[redis.Redis] = None


def _encode(value: Any) -> str:
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return str(value)


def get_redis() -> redis.Redis:
    """Shared connection pool, created on first use"""
    global _client
    if _client is None:
        _client = redis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            socket_connect_timeout=2,
            socket_timeout=2,
            health_check_interval=30,
        )
    return _client


def get_cache_key(prefix: str, *args) -> str:
    return ":".join([KEY_NAMESPACE, prefix, *(str(arg) for arg in args)])


def get_cache(key: str) -> Optional[Any]:
    if not settings.CACHE_ENABLED:
        return None
    try:
        value = get_redis().get(key)
    except redis.RedisError as e:
        logger.warning("cache_get_failed", key=key, error=str(e))
        return None
    return json.loads(value) if value else None


def set_cache(key: str, value: Any, ttl: Optional[int] = None) -> bool:
    if not settings.CACHE_ENABLED:
        return False
    try:
        return bool(get_redis().setex(key, ttl or settings.REDIS_CACHE_TTL, json.dumps(value, default=_encode)))
    except redis.RedisError as e:
        logger.warning("cache_set_failed", key=key, error=str(e))
        return False


def delete_cache(key: str) -> bool:
    if not settings.CACHE_ENABLED:
        return False
    try:
        return bool(get_redis().delete(key))
    except redis.RedisError as e:
        logger.warning("cache_delete_failed", key=key, error=str(e))
        return False


def get_or_set(key: str, loader: Callable[[], Any], ttl: Optional[int] = None) -> Any:
    """Read-through cache: return the cached value or compute and store it"""
    cached = get_cache(key)
    if cached is not None:
        logger.debug("cache_hit", key=key)
        return cached
    value = loader()
    set_cache(key, value, ttl=ttl)
    return value
