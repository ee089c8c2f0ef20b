"""
Token revocation backed by Redis.

Two mechanisms:
- a per-token blacklist keyed by the token's jti (logout), kept only
  until the token would have expired anyway;
- a per-user "revoked before" timestamp (block, role change). Tokens
  issued before it are rejected, tokens issued after it work.
"""

import logging
import time
from typing import Any, Dict, Optional

from freight_ledger.app.core.redis_client import get_redis
from freight_ledger.app.core.config import settings

logger = logging.getLogger(__name__)

TOKEN_BLACKLIST_PREFIX = "blacklist:jti:"
USER_REVOKED_PREFIX = "user:revoked_before:"


def _remaining_ttl(payload: Dict[str, Any]) -> int:
    exp = payload.get("exp")
    if exp is None:
        return settings.access_token_expire_minutes * 60
    return max(int(exp - time.time()), 1)


async def revoke_token(payload: Dict[str, Any]) -> bool:
    """
    Blacklist the token described by a decoded payload.

    Returns:
        True if stored, False if Redis is unavailable
    """
    try:
        redis_client = await get_redis()
        await redis_client.setex(
            f"{TOKEN_BLACKLIST_PREFIX}{payload['jti']}", _remaining_ttl(payload), str(payload["user_id"])
        )
        return True
    except Exception as e:
        logger.warning("Error revoking token for user %s: %s", payload.get("user_id"), e)
        return False


async def is_token_revoked(payload: Dict[str, Any]) -> bool:
    jti = payload.get("jti")
    if not jti:
        return False
    try:
        redis_client = await get_redis()
        return await redis_client.exists(f"{TOKEN_BLACKLIST_PREFIX}{jti}") > 0
    except Exception as e:
        logger.warning("Error checking token revocation: %s", e)
        # Fail open: a Redis outage must not lock the bookkeepers out
        return False


async def revoke_all_user_tokens(user_id: int) -> bool:
    """Reject every token issued to the user up to now."""
    try:
        redis_client = await get_redis()
        await redis_client.setex(
            f"{USER_REVOKED_PREFIX}{user_id}",
            settings.access_token_expire_minutes * 60,
            repr(time.time()),
        )
        return True
    except Exception as e:
        logger.warning("Error revoking all tokens for user %s: %s", user_id, e)
        return False


async def _revoked_before(user_id: int) -> Optional[float]:
    redis_client = await get_redis()
    raw = await redis_client.get(f"{USER_REVOKED_PREFIX}{user_id}")
    return float(raw) if raw is not None else None


async def are_user_tokens_revoked(payload: Dict[str, Any]) -> bool:
    """True when the token predates the user's latest user-wide revocation."""
    try:
        cutoff = await _revoked_before(payload["user_id"])
    except Exception as e:
        logger.warning("Error checking user token revocation: %s", e)
        return False

    if cutoff is None:
        return False
    issued_at = payload.get("iat")
    return issued_at is None or float(issued_at) <= cutoff


async def clear_user_token_revocation(user_id: int) -> bool:
    """
    Lift a user-wide revocation (user reactivated).

    Individually blacklisted tokens stay revoked.
    """
    try:
        redis_client = await get_redis()
        await redis_client.delete(f"{USER_REVOKED_PREFIX}{user_id}")
        return True
    except Exception as e:
        logger.warning("Error clearing token revocation for user %s: %s", user_id, e)
        return False
