"""
Authentication API endpoints.

Current-user info and logout. Tokens themselves are issued by the
identity provider with the shared secret.
"""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from freight_ledger.app.db.session import get_db
from freight_ledger.app.models.user import User
from freight_ledger.app.schemas.auth import UserResponse, LogoutResponse
from freight_ledger.app.core.dependencies import get_current_user
from freight_ledger.app.core.token_revocation import revoke_token
from freight_ledger.app.services.audit import log_user_action, AuditAction

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """The authenticated user's profile and current role."""
    # Already loaded into this session by get_current_user
    user = await db.get(User, current_user["user_id"])
    return UserResponse.model_validate(user)


@router.post("/logout", response_model=LogoutResponse)
async def logout(
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Revoke the bearer token used for this request.
    """
    revoked = await revoke_token(current_user["claims"])
    if not revoked:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Token revocation is temporarily unavailable"
        )

    await log_user_action(
        db=db,
        current_user=current_user,
        action=AuditAction.TOKEN_REVOKED,
        target_type="user",
        target_id=current_user["user_id"],
    )

    return LogoutResponse(success=True, message="Logged out")
