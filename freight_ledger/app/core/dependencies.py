"""
Authentication dependency for ledger endpoints.

The bearer token identifies the actor; the users table decides whether
that actor is still active and which role they hold.
"""

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from freight_ledger.app.core.jwt import decode_access_token
from freight_ledger.app.core.token_revocation import is_token_revoked, are_user_tokens_revoked
from freight_ledger.app.db.session import get_db
from freight_ledger.app.models.user import User

security = HTTPBearer()


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: AsyncSession = Depends(get_db)
) -> dict:
    """
    Resolve the request's actor.

    Returns a dict with user_id, username and role (taken from the
    database row, not the token, so a role change applies at once),
    plus the decoded claims under "claims" for logout.

    Raises:
        HTTPException: 401 for bad, revoked or unknown tokens; 403 for
        inactive users
    """
    payload = decode_access_token(credentials.credentials)
    if payload is None:
        raise _unauthorized("Could not validate credentials")

    if await is_token_revoked(payload):
        raise _unauthorized("Token has been revoked")

    if await are_user_tokens_revoked(payload):
        raise _unauthorized("User access has been revoked")

    user = await db.get(User, payload["user_id"])
    if user is None:
        raise _unauthorized("User not found")

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is inactive",
        )

    return {
        "user_id": user.id,
        "username": user.username,
        "role": user.role.value,
        "claims": payload,
    }
