"""
In-memory fixed-window rate limiting for the /api routes
Counters live in process memory, one window per client key
"""

import logging
import time
from threading import Lock

from fastapi import HTTPException, Request

logger = logging.getLogger(__name__)

# Format: {key: {'count': int, 'reset_time': float}}
memory_cache: dict[str, dict] = {}
cache_lock = Lock()

MEMORY_CACHE_CLEANUP_INTERVAL = 60  # seconds
last_cleanup_time = 0.0


def cleanup_expired_cache(current_time: float) -> None:
    """Remove expired entries from memory cache"""
    global last_cleanup_time

    if current_time - last_cleanup_time < MEMORY_CACHE_CLEANUP_INTERVAL:
        return

    with cache_lock:
        expired_keys = [k for k, v in memory_cache.items() if current_time >= v["reset_time"]]
        for k in expired_keys:
            del memory_cache[k]

        if expired_keys:
            logger.debug(f"🧹 Cleaned up {len(expired_keys)} expired rate limit entries")

    last_cleanup_time = current_time


def reset_rate_limits() -> None:
    """Drop every counter"""
    with cache_lock:
        memory_cache.clear()


def check_rate_limit(key: str, limit: int, window_seconds: float) -> tuple[bool, int, int]:
    """Count one request against a key's current window

    Returns:
        Tuple of (is_allowed, current_count, ttl_seconds)
    """
    current_time = time.time()
    cleanup_expired_cache(current_time)

    with cache_lock:
        entry = memory_cache.get(key)
        if entry is None or current_time >= entry["reset_time"]:
            entry = {"count": 0, "reset_time": current_time + window_seconds}
            memory_cache[key] = entry

        is_allowed = entry["count"] < limit
        if is_allowed:
            entry["count"] += 1

        ttl = max(0, int(entry["reset_time"] - current_time + 0.999))
        return is_allowed, entry["count"], ttl


def get_client_ip(request: Request) -> str:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


async def rate_limit_dependency(
    request: Request, limit: int, window_seconds: float, key_prefix: str = "rate_limit"
):
    """
    FastAPI dependency for rate limiting

    Args:
        request: FastAPI request object
        limit: Maximum requests allowed per window
        window_seconds: Window length in seconds
        key_prefix: Prefix for the counter key
    """
    key = f"{key_prefix}:{get_client_ip(request)}"
    is_allowed, current_count, ttl = check_rate_limit(key, limit, window_seconds)

    if not is_allowed:
        logger.warning(f"🚫 Rate limit EXCEEDED for {key} - {current_count}/{limit} requests used")
        raise HTTPException(
            status_code=429,
            detail=f"Too many requests from this IP, please try again in {ttl} seconds",
            headers={"Retry-After": str(ttl)},
        )

    request.state.rate_limit_remaining = limit - current_count
    request.state.rate_limit_limit = limit


def create_rate_limiter(limit: int, window_ms: int, key_prefix: str = "rate_limit"):
    """
    Create a rate limiter dependency with specific parameters

    Example usage:
        api_rate_limit = create_rate_limiter(limit=100, window_ms=900000, key_prefix="api")
        app.include_router(router, dependencies=[Depends(api_rate_limit)])
    """
    window_seconds = window_ms / 1000

    async def rate_limiter(request: Request):
        return await rate_limit_dependency(request, limit, window_seconds, key_prefix)

    return rate_limiter
