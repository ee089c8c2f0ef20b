"""
Caching Service.

Redis-backed JSON cache for slow-changing reference data
(exchange rates).
"""

import json
import logging
from typing import Any, Optional

from freight_ledger.app.core.redis_client import get_redis

logger = logging.getLogger(__name__)

CACHE_PREFIX = "cache:"


class CacheService:

    @staticmethod
    async def get(key: str) -> Optional[Any]:
        try:
            redis_client = await get_redis()
            raw = await redis_client.get(f"{CACHE_PREFIX}{key}")
        except Exception as e:
            logger.warning("Cache read failed for %s: %s", key, e)
            return None

        if raw is None:
            return None
        return json.loads(raw)

    @staticmethod
    async def set(key: str, data: Any, ttl_seconds: int = 300) -> None:
        try:
            redis_client = await get_redis()
            await redis_client.set(f"{CACHE_PREFIX}{key}", json.dumps(data), ex=ttl_seconds)
        except Exception as e:
            logger.warning("Cache write failed for %s: %s", key, e)

    @staticmethod
    async def delete(key: str) -> None:
        try:
            redis_client = await get_redis()
            await redis_client.delete(f"{CACHE_PREFIX}{key}")
        except Exception as e:
            logger.warning("Cache invalidation failed for %s: %s", key, e)
