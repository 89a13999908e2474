"""Redis connection management.

Redis is optional. When configured it backs:
- Comment rate limiting and duplicate detection
- The Telegram channel HTML cache
"""

import redis.asyncio as redis

from src.config.settings import Settings
from src.core.logging import get_logger


logger = get_logger(__name__)


async def init_redis(settings: Settings) -> redis.Redis | None:
    """Create a Redis client and check the connection.

    Returns None when no Redis URL is configured.
    """
    if not settings.redis_url:
        logger.info("redis_not_configured")
        return None

    client = redis.from_url(
        settings.redis_url,
        max_connections=settings.redis_max_connections,
        socket_timeout=settings.redis_socket_timeout,
        socket_connect_timeout=settings.redis_socket_connect_timeout,
        decode_responses=True,
    )

    try:
        await client.ping()
        logger.info("redis_connected", url=settings.redis_url)
    except redis.ConnectionError as e:
        logger.warning("redis_connection_failed", error=str(e))
        await client.aclose()
        raise

    return client


async def shutdown_redis(client: redis.Redis | None) -> None:
    """Close a Redis client created by ``init_redis``."""
    if client is not None:
        await client.aclose()
        logger.info("redis_disconnected")


def telegram_cache_key(cache_id: str) -> str:
    """Cache key for a fetched Telegram page."""
    return f"telegram:html:{cache_id}"


def comment_rate_key(author: str, window: str) -> str:
    """Rate-limit counter key for a comment author."""
    return f"comments:rate:{author}:{window}"


def comment_recent_key(author: str) -> str:
    """Recent content hashes of a comment author."""
    return f"comments:recent:{author}"
