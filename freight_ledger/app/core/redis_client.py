"""
Redis connection for token revocation and exchange-rate caching.

Redis is an accelerator here, never a source of truth: callers treat
any Redis error as a cache miss or a non-revoked token.
"""

import logging

import redis.asyncio as redis
from freight_ledger.app.core.config import settings

logger = logging.getLogger(__name__)

redis_client = redis.from_url(
    settings.redis_url,
    decode_responses=settings.redis_decode_responses,
)


async def get_redis():
    # Read the module attribute on each call so tests can swap the client
    return redis_client


async def ping_redis() -> bool:
    try:
        return bool(await redis_client.ping())
    except Exception as e:
        logger.warning("Redis ping failed: %s", e)
        return False


async def close_redis() -> None:
    await redis_client.aclose()
