"""Redis connection factory."""

from typing import Optional

import redis.asyncio as redis

from ...config import config

# Global client instance
_redis_client: Optional[redis.Redis] = None


async def get_redis(url: Optional[str] = None) -> redis.Redis:
    """Get or create global Redis client."""
    global _redis_client
    if _redis_client is None:
        _redis_client = redis.from_url(
            url or config.REDIS_URL,
            encoding="utf-8",
            decode_responses=True,
        )
    return _redis_client


async def redis_available() -> bool:
    """Ping Redis; False when it cannot be reached."""
    try:
        client = await get_redis()
        return bool(await client.ping())
    except (redis.RedisError, OSError) as e:
        print(f"[REDIS] Unavailable: {e}")
        return False


async def close_redis() -> None:
    """Close global Redis connection."""
    global _redis_client
    if _redis_client is not None:
        await _redis_client.aclose()
        _redis_client = None
