from slowapi import Limiter
from slowapi.util import get_remote_address
from fastapi import Request
import redis
from fitclub.config import settings
from fitclub.utils.logger import get_logger

logger = get_logger(__name__)

# Redis connection for rate limiting
redis_client = None
if settings.RATE_LIMIT_ENABLED:
    try:
        redis_client = redis.Redis(
            host=settings.REDIS_HOST,
            port=settings.REDIS_PORT,
            decode_responses=True,
            retry_on_timeout=True,
            socket_connect_timeout=5,
            socket_timeout=5
        )
        redis_client.ping()
        logger.info(f"Rate limiting Redis connected: {settings.REDIS_HOST}:{settings.REDIS_PORT}")
    except Exception as e:
        logger.warning(f"Rate limiting Redis connection failed: {e}. Using in-memory fallback.")
        redis_client = None

def get_user_id_or_ip(request: Request):
    """
    Get user ID resolved by authentication or fall back to IP address.
    """
    user_id = getattr(request.state, 'user_id', None)
    if user_id:
        return f"user:{user_id}"
    return f"ip:{get_remote_address(request)}"

limiter = Limiter(
    key_func=get_user_id_or_ip,
    storage_uri=f"redis://{settings.REDIS_HOST}:{settings.REDIS_PORT}" if redis_client else "memory://",
    default_limits=["1000/hour"],
    enabled=settings.RATE_LIMIT_ENABLED,
)

# Rate limiting configurations for different endpoints
RATE_LIMITS = {
    # Check-in / check-out (guards against rapid double taps)
    "checkin": "10/minute",

    # Gamification writes
    "activity_write": "60/hour",

    # General API endpoints
    "api_read": "200/hour",
    "admin": "30/minute",
}

def get_rate_limit_for_endpoint(endpoint: str) -> str:
    """Get rate limit configuration for specific endpoint."""
    return RATE_LIMITS.get(endpoint, "100/hour")

def rate_limit_checkin(func):
    """Rate limit for check-in/check-out endpoints."""
    return limiter.limit(get_rate_limit_for_endpoint("checkin"))(func)

def rate_limit_activity_write(func):
    """Rate limit for workout/goal/challenge writes."""
    return limiter.limit(get_rate_limit_for_endpoint("activity_write"))(func)

def rate_limit_api_read(func):
    """Rate limit for read API endpoints."""
    return limiter.limit(get_rate_limit_for_endpoint("api_read"))(func)

def rate_limit_admin(func):
    """Rate limit for admin endpoints."""
    return limiter.limit(get_rate_limit_for_endpoint("admin"))(func)
