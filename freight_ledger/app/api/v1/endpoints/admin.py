"""
Admin API Endpoints.

User provisioning, roles, blocking and the audit trail. Every change is
audited; anything that alters what a user may do cuts off their
existing tokens.
"""

from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, or_
from typing import Optional
from freight_ledger.app.db.session import get_db
from freight_ledger.app.models.user import User
from freight_ledger.app.models.enums import UserRole
from freight_ledger.app.schemas.auth import UserResponse
from freight_ledger.app.schemas.admin import (
    UserCreate, UserRoleUpdate, UserListResponse, BlockUserRequest,
    AdminActionResponse, AuditTrailResponse, AuditLogResponse
)
from freight_ledger.app.core.guards import require_admin
from freight_ledger.app.core.token_revocation import revoke_all_user_tokens, clear_user_token_revocation
from freight_ledger.app.services.audit import log_user_action, AuditAction, get_audit_trail

router = APIRouter(prefix="/admin", tags=["Admin"])


async def _get_user_or_404(db: AsyncSession, user_id: int) -> User:
    user = await db.get(User, user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


@router.get("/users", response_model=UserListResponse)
async def list_users(
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=100),
    role: Optional[UserRole] = None,
    admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    query = select(User)
    count_query = select(func.count(User.id))
    if role:
        query = query.where(User.role == role)
        count_query = count_query.where(User.role == role)

    total = (await db.execute(count_query)).scalar()
    result = await db.execute(query.order_by(User.id).offset((page - 1) * page_size).limit(page_size))

    return UserListResponse(
        users=[UserResponse.model_validate(user) for user in result.scalars().all()],
        total=total,
        page=page,
        page_size=page_size
    )


@router.post("/users", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    user_data: UserCreate,
    admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """
    Provision a user so their identity-provider tokens are accepted.
    """
    result = await db.execute(
        select(User).where(or_(User.username == user_data.username, User.email == user_data.email))
    )
    existing_user = result.scalars().first()
    if existing_user:
        field = "Username" if existing_user.username == user_data.username else "Email"
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"{field} already registered")

    new_user = User(email=user_data.email, username=user_data.username, role=user_data.role, is_active=True)
    db.add(new_user)
    await db.commit()
    await db.refresh(new_user)
    response = UserResponse.model_validate(new_user)

    await log_user_action(
        db=db,
        current_user=admin,
        action=AuditAction.USER_CREATED,
        target_type="user",
        target_id=new_user.id,
        metadata={"username": new_user.username, "role": new_user.role.value}
    )
    return response


@router.get("/users/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: int,
    admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    return UserResponse.model_validate(await _get_user_or_404(db, user_id))


@router.put("/users/{user_id}/role", response_model=UserResponse)
async def change_user_role(
    user_id: int,
    request: UserRoleUpdate,
    admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """
    Change a user's role. Tokens issued before the change stop working.
    """
    target_user = await _get_user_or_404(db, user_id)
    if target_user.id == admin["user_id"]:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Cannot change your own role")

    old_role = target_user.role
    target_user.role = request.role
    await db.commit()
    await db.refresh(target_user)
    response = UserResponse.model_validate(target_user)

    await revoke_all_user_tokens(user_id)
    await log_user_action(
        db=db,
        current_user=admin,
        action=AuditAction.USER_ROLE_CHANGED,
        target_type="user",
        target_id=user_id,
        metadata={"from": old_role.value, "to": request.role.value}
    )
    return response


async def _set_active(db: AsyncSession, admin: dict, user_id: int, active: bool, reason: Optional[str]):
    target_user = await _get_user_or_404(db, user_id)

    if not active and target_user.role == UserRole.ADMIN:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Cannot block another admin user")
    if target_user.is_active == active:
        state = "active" if active else "blocked"
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"User is already {state}")

    target_user.is_active = active
    await db.commit()

    if active:
        await clear_user_token_revocation(user_id)
        action, verb = AuditAction.USER_UNBLOCKED, "unblocked"
    else:
        await revoke_all_user_tokens(user_id)
        action, verb = AuditAction.USER_BLOCKED, "blocked"

    audit_log = await log_user_action(
        db=db,
        current_user=admin,
        action=action,
        target_type="user",
        target_id=user_id,
        metadata={"username": target_user.username, "reason": reason}
    )
    return AdminActionResponse(
        success=True,
        message=f"User '{target_user.username}' has been {verb}",
        user_id=user_id,
        action=action,
        audit_log_id=audit_log.id
    )


@router.post("/users/{user_id}/block", response_model=AdminActionResponse)
async def block_user(
    user_id: int,
    request: BlockUserRequest,
    admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Deactivate a user; their sessions end immediately."""
    return await _set_active(db, admin, user_id, False, request.reason)


@router.post("/users/{user_id}/unblock", response_model=AdminActionResponse)
async def unblock_user(
    user_id: int,
    request: BlockUserRequest,
    admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    return await _set_active(db, admin, user_id, True, request.reason)


@router.get("/audit-logs", response_model=AuditTrailResponse)
async def get_audit_logs(
    target_type: Optional[str] = Query(None, description="journal_entry, account, exchange_rate, user"),
    target_id: Optional[str] = None,
    action: Optional[str] = None,
    actor_id: Optional[int] = None,
    limit: int = Query(100, ge=1, le=500),
    admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    logs = await get_audit_trail(
        db=db,
        target_type=target_type,
        target_id=target_id,
        action=action,
        actor_id=actor_id,
        limit=limit
    )
    return AuditTrailResponse(logs=[AuditLogResponse.model_validate(log) for log in logs], total=len(logs))
