"""
Audit trail for ledger writes and admin actions.

Each row records who did what to which record, plus the correlation
id of the request it happened in.
"""

from typing import Optional, Dict, Any, List
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, desc
from freight_ledger.app.core.observability import correlation_id_var
from freight_ledger.app.models.audit_log import AuditLog


class AuditAction:
    TOKEN_REVOKED = "TOKEN_REVOKED"

    USER_CREATED = "USER_CREATED"
    USER_BLOCKED = "USER_BLOCKED"
    USER_UNBLOCKED = "USER_UNBLOCKED"
    USER_ROLE_CHANGED = "USER_ROLE_CHANGED"

    JOURNAL_ENTRY_CREATED = "JOURNAL_ENTRY_CREATED"
    JOURNAL_ENTRY_POSTED = "JOURNAL_ENTRY_POSTED"
    JOURNAL_ENTRY_VOIDED = "JOURNAL_ENTRY_VOIDED"
    JOURNAL_ENTRY_REVERSED = "JOURNAL_ENTRY_REVERSED"

    ACCOUNT_CREATED = "ACCOUNT_CREATED"
    EXCHANGE_RATE_UPDATED = "EXCHANGE_RATE_UPDATED"


async def log_event(
    db: AsyncSession,
    action: str,
    actor_id: Optional[int] = None,
    actor_username: Optional[str] = None,
    target_type: Optional[str] = None,
    target_id: Optional[Any] = None,
    metadata: Optional[Dict[str, Any]] = None
) -> AuditLog:
    """
    Write one audit row and commit it.

    Args:
        action: One of the AuditAction constants
        actor_id: User performing the action; None for system actions (seeding)
        target_type: Kind of record acted upon ("journal_entry", "account", ...)
        target_id: ID of the record; stored as a string
        metadata: Free-form JSON context
    """
    correlation_id = correlation_id_var.get()
    audit_log = AuditLog(
        actor_id=actor_id,
        actor_username=actor_username,
        action=action,
        target_type=target_type,
        target_id=str(target_id) if target_id is not None else None,
        meta_data=metadata,
        correlation_id=None if correlation_id == "-" else correlation_id,
    )

    db.add(audit_log)
    await db.commit()
    await db.refresh(audit_log)

    return audit_log


async def log_user_action(
    db: AsyncSession,
    current_user: dict,
    action: str,
    target_type: str,
    target_id: Any,
    metadata: Optional[Dict[str, Any]] = None
) -> AuditLog:
    """log_event on behalf of the request's authenticated user."""
    return await log_event(
        db=db,
        action=action,
        actor_id=current_user["user_id"],
        actor_username=current_user.get("username"),
        target_type=target_type,
        target_id=target_id,
        metadata=metadata
    )


async def get_audit_trail(
    db: AsyncSession,
    target_type: Optional[str] = None,
    target_id: Optional[Any] = None,
    action: Optional[str] = None,
    actor_id: Optional[int] = None,
    limit: int = 100
) -> List[AuditLog]:
    """Most recent first."""
    query = select(AuditLog).order_by(desc(AuditLog.timestamp), desc(AuditLog.id))

    if target_type:
        query = query.where(AuditLog.target_type == target_type)
    if target_id is not None:
        query = query.where(AuditLog.target_id == str(target_id))
    if action:
        query = query.where(AuditLog.action == action)
    if actor_id is not None:
        query = query.where(AuditLog.actor_id == actor_id)

    result = await db.execute(query.limit(limit))
    return result.scalars().all()
