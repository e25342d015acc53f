import json
from fitclub.utils.logger import get_logger
from typing import Any, Optional
import redis
from fitclub.config import settings

logger = get_logger(__name__)

LEADERBOARD_KEY_PREFIX = "leaderboard"

# Redis client initialization
redis_client = None
if settings.CACHE_ENABLED:
    try:
        redis_client = redis.Redis(
            host=settings.REDIS_HOST,
            port=settings.REDIS_PORT,
            db=0,
            decode_responses=True,
            retry_on_timeout=True,
            socket_connect_timeout=5,
            socket_timeout=5
        )
        # Test connection
        redis_client.ping()
        logger.info(f"Cache Redis connected: {settings.REDIS_HOST}:{settings.REDIS_PORT}")
    except Exception as e:
        logger.warning(f"Cache Redis connection failed: {e}. Cache will be disabled.")
        redis_client = None

def is_redis_available() -> bool:
    """
    Check if Redis is available and connected.

    Returns:
        True if Redis is available, False otherwise
    """
    if redis_client is None:
        return False

    try:
        redis_client.ping()
        return True
    except Exception as e:
        logger.warning(f"Redis ping failed: {e}")
        return False

def get_cached_data(key: str) -> Optional[Any]:
    """
    Get data from Redis cache.

    Args:
        key: The cache key

    Returns:
        The cached data if found, None otherwise
    """
    if not is_redis_available():
        return None

    try:
        data = redis_client.get(key)
        if data:
            return json.loads(data)
    except Exception as e:
        logger.error(f"Error getting cached data for key {key}: {e}")

    return None

def set_cached_data(key: str, value: Any, expire_seconds: int = 3600) -> bool:
    """
    Set data in Redis cache with expiration.

    Args:
        key: The cache key
        value: The data to cache (must be JSON serializable)
        expire_seconds: Time to live in seconds (default: 1 hour)

    Returns:
        True if successful, False otherwise
    """
    if not is_redis_available():
        return False

    try:
        redis_client.setex(key, expire_seconds, json.dumps(value))
        return True
    except Exception as e:
        logger.error(f"Error setting cached data for key {key}: {e}")
        return False

def delete_by_prefix(prefix: str) -> int:
    """
    Delete every key starting with `prefix`, using SCAN rather than KEYS.

    Returns:
        Number of keys deleted
    """
    if not is_redis_available():
        return 0

    try:
        keys = list(redis_client.scan_iter(match=f"{prefix}:*", count=100))
        if keys:
            redis_client.delete(*keys)
        return len(keys)
    except Exception as e:
        logger.error(f"Error deleting keys with prefix {prefix}: {e}")
        return 0

def generate_leaderboard_key(limit: int) -> str:
    return f"{LEADERBOARD_KEY_PREFIX}:{limit}"

def get_cached_leaderboard(limit: int) -> Optional[list]:
    return get_cached_data(generate_leaderboard_key(limit))

def set_cached_leaderboard(limit: int, entries: list) -> bool:
    return set_cached_data(generate_leaderboard_key(limit), entries, settings.LEADERBOARD_CACHE_SECONDS)

def invalidate_leaderboard() -> int:
    """Drop all cached leaderboards after a points change."""
    return delete_by_prefix(LEADERBOARD_KEY_PREFIX)
