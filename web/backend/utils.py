#!/usr/bin/env python3
"""
Utility functions for the web application.
"""

import asyncio
import logging
from datetime import datetime
from typing import Any, Awaitable, Callable, Optional

from core.cache.response_cache import CacheKey, ResponseCacheService

logger = logging.getLogger(__name__)


def safe_datetime_iso(dt: Optional[datetime]) -> Optional[str]:
    """
    Safely convert datetime to ISO format string.

    Args:
        dt: Datetime object.

    Returns:
        ISO format string or None.
    """
    if dt is None:
        return None
    return dt.isoformat()


def format_acceptance_rate(rate: Optional[float]) -> str:
    """acRate as the upstream list endpoint sends it (a string)."""
    value = rate or 0.0
    if value == int(value):
        return str(int(value))
    return f"{value:g}"


async def cached_response(
    cache: Optional[ResponseCacheService],
    key: CacheKey,
    producer: Callable[[], Awaitable[Any]],
    ttl_seconds: Optional[int] = None,
    bypass: bool = False
) -> Any:
    """
    Serve ``key`` from the response cache or produce and store it.

    Args:
        cache: Response cache, or None when caching is disabled.
        key: Structured cache key from make_cache_key().
        producer: Coroutine factory building the JSON-ready response.
        ttl_seconds: Override of the cache's default TTL.
        bypass: Skip the read (the fresh result is still written).
    """
    if cache is not None and not bypass:
        hit = await asyncio.to_thread(cache.get, key)
        if hit is not None:
            return hit

    value = await producer()

    if cache is not None:
        await asyncio.to_thread(cache.set, key, value, ttl_seconds)
    return value
