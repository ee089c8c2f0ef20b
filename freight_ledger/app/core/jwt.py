"""
JWT helpers.

Tokens are normally minted by the identity provider with the shared
secret; create_user_token is what the seed script and tests use to
mint the same shape locally.
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any
from jose import JWTError, jwt
from freight_ledger.app.core.config import settings

# Claims a token must carry to identify a ledger actor
REQUIRED_CLAIMS = ("user_id", "role")


def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """
    Sign a token for the given claims.

    Adds exp, iat (float seconds, compared against user-wide revocation
    timestamps) and a jti used as the blacklist key on logout.
    """
    issued_at = datetime.now(timezone.utc)
    lifetime = expires_delta or timedelta(minutes=settings.access_token_expire_minutes)

    claims = dict(data)
    claims.update({
        "exp": issued_at + lifetime,
        "iat": issued_at.timestamp(),
        "jti": uuid.uuid4().hex,
    })
    return jwt.encode(claims, settings.secret_key, algorithm=settings.algorithm)


def create_user_token(user, expires_delta: Optional[timedelta] = None) -> str:
    """Token for a User row: sub, user_id and role."""
    return create_access_token(
        {"sub": user.username, "user_id": user.id, "role": user.role.value},
        expires_delta=expires_delta,
    )


def decode_access_token(token: str) -> Optional[Dict[str, Any]]:
    """
    Verify signature and expiry.

    Returns None for a bad token or one missing user_id/role.
    """
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError:
        return None

    if any(payload.get(claim) is None for claim in REQUIRED_CLAIMS):
        return None
    return payload
