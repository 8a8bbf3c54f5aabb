"""
Cache Service Singleton - Assessment Results Engine
results_engine/services/cache.py

Provides a singleton Redis cache instance and the results cache keys.
Gracefully handles Redis unavailability.
"""
import logging
import redis
from typing import Optional

from results_engine.config import get_settings
from results_engine.services.redis_cache import RedisCache

logger = logging.getLogger(__name__)

# Singleton instance
_cache: Optional[RedisCache] = None


def results_key(assessment_id: str) -> str:
    return f"results:{assessment_id}"


def results_ttl() -> int:
    return get_settings().CACHE_TTL_RESULTS


def get_cache() -> Optional[RedisCache]:
    """
    Get or create Redis cache instance.

    Returns:
        RedisCache instance if caching is enabled and Redis is reachable, None otherwise.

    Note:
        Returns None if Redis is unavailable, allowing results to be served
        straight from the data source (graceful degradation).
    """
    global _cache
    if not get_settings().CACHE_ENABLED:
        return None
    if _cache is None:
        try:
            _cache = RedisCache()
            _cache.client.ping()  # Test connection
        except (redis.RedisError, ConnectionError) as e:
            logger.warning(f"Redis unavailable, caching disabled: {e}")
            _cache = None
    return _cache


def reset_cache() -> None:
    """
    Reset the cache singleton.

    Useful for testing or when Redis connection needs to be re-established.
    """
    global _cache
    _cache = None
