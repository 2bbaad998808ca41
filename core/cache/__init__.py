"""Cache Module - Caching services."""
from core.cache.response_cache import (
    ResponseCacheService,
    make_cache_key,
    DEFAULT_TTL_SECONDS
)

__all__ = [
    'ResponseCacheService',
    'make_cache_key',
    'DEFAULT_TTL_SECONDS'
]
