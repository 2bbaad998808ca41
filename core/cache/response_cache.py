"""Response Cache Service - short-lived Redis cache in front of the routes."""
import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Hashable, Optional, Tuple
from urllib.parse import urlparse

from redis import Redis

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 600
KEY_PREFIX = "resp:"

CacheKey = Tuple[str, Tuple[Tuple[str, Hashable], ...]]


def _sanitize_url(url: str) -> str:
    """Remove credentials from URL for safe logging."""
    try:
        parsed = urlparse(url)
        if parsed.password:
            sanitized = parsed._replace(
                netloc=f"{parsed.username or ''}:*@{parsed.hostname}:{parsed.port or 6379}"
            )
            return sanitized.geturl()
        return url
    except ValueError:
        return url


def make_cache_key(route: str, **params: Any) -> CacheKey:
    """Structured key: (route, ((name, value), ...)) with names sorted.

    Values keep their type, so None, "none" and "None" are three different keys.
    """
    return route, tuple(sorted(params.items()))


def _redis_key(key: CacheKey) -> str:
    route, params = key
    encoded = json.dumps([route, [[name, value] for name, value in params]],
                         separators=(",", ":"), sort_keys=True, default=str)
    return f"{KEY_PREFIX}{encoded}"


class ResponseCacheService:
    """
    TTL cache for formatted route responses.

    Keyed by make_cache_key(); unrelated to entity staleness. When Redis is
    unreachable the cache is disabled: reads miss and writes are no-ops.
    """

    def __init__(
        self,
        redis_url: str = "redis://localhost:6379/0",
        default_ttl_seconds: int = DEFAULT_TTL_SECONDS,
        redis_client: Optional[Redis] = None
    ):
        self.redis_url = redis_url
        self.default_ttl_seconds = default_ttl_seconds
        self._redis: Optional[Redis] = None
        self._available = False

        try:
            self._redis = redis_client or Redis.from_url(
                redis_url,
                decode_responses=True,
                socket_connect_timeout=2,
                socket_timeout=2
            )
            self._redis.ping()
            self._available = True
            logger.info(f"Response cache connected to Redis at {_sanitize_url(redis_url)}")
        except Exception as e:
            logger.warning(f"Response cache Redis unavailable, caching disabled: {e}")
            self._redis = None
            self._available = False

    @property
    def is_available(self) -> bool:
        return self._available and self._redis is not None

    def get(self, key: CacheKey) -> Optional[Any]:
        if not self.is_available:
            return None

        try:
            data = self._redis.get(_redis_key(key))
            if data:
                logger.debug(f"Cache hit for {key[0]}")
                return json.loads(data).get("data")
            logger.debug(f"Cache miss for {key[0]}")
            return None
        except Exception as e:
            logger.warning(f"Error reading from response cache: {e}")
            return None

    def set(self, key: CacheKey, value: Any, ttl_seconds: Optional[int] = None) -> bool:
        if not self.is_available:
            return False

        try:
            ttl = ttl_seconds or self.default_ttl_seconds
            cache_entry = {
                "data": value,
                "cached_at": datetime.now(timezone.utc).isoformat(),
                "ttl_seconds": ttl
            }
            self._redis.setex(_redis_key(key), ttl, json.dumps(cache_entry, default=str))
            return True
        except Exception as e:
            logger.warning(f"Error writing to response cache: {e}")
            return False

    def delete(self, key: CacheKey) -> bool:
        if not self.is_available:
            return False

        try:
            self._redis.delete(_redis_key(key))
            return True
        except Exception as e:
            logger.warning(f"Error deleting from response cache: {e}")
            return False

    def get_cache_stats(self) -> Dict[str, Any]:
        if not self.is_available:
            return {"available": False}

        try:
            info = self._redis.info()
            key_count = 0
            cursor = 0
            while True:
                cursor, keys = self._redis.scan(cursor=cursor, match=f"{KEY_PREFIX}*", count=1000)
                key_count += len(keys)
                if cursor == 0:
                    break
            return {
                "available": True,
                "used_memory_human": info.get("used_memory_human", "unknown"),
                "response_cache_keys": key_count,
                "ttl_seconds": self.default_ttl_seconds,
            }
        except Exception as e:
            logger.warning(f"Error getting cache stats: {e}")
            return {"available": False, "error": str(e)}

    def clear_all(self) -> bool:
        """Drop every cached response."""
        if not self.is_available:
            return False

        try:
            cursor = 0
            deleted = 0
            while True:
                cursor, keys = self._redis.scan(cursor=cursor, match=f"{KEY_PREFIX}*", count=100)
                if keys:
                    self._redis.delete(*keys)
                    deleted += len(keys)
                if cursor == 0:
                    break
            logger.info(f"Cleared {deleted} cached responses")
            return True
        except Exception as e:
            logger.warning(f"Error clearing response cache: {e}")
            return False
