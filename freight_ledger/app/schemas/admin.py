"""
Admin API schemas: user provisioning and the audit trail.
"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional, List
from freight_ledger.app.models.enums import UserRole
from freight_ledger.app.schemas.auth import UserResponse


class UserCreate(BaseModel):
    """A user the identity provider already knows, given a ledger role."""
    email: str = Field(..., min_length=3, max_length=255)
    username: str = Field(..., min_length=3, max_length=100)
    role: UserRole = UserRole.EMPLOYEE


class UserRoleUpdate(BaseModel):
    role: UserRole


class UserListResponse(BaseModel):
    users: List[UserResponse]
    total: int
    page: int
    page_size: int


class BlockUserRequest(BaseModel):
    reason: Optional[str] = Field(None, description="Recorded in the audit log")


class AdminActionResponse(BaseModel):
    success: bool
    message: str
    user_id: int
    action: str
    audit_log_id: int


class AuditLogResponse(BaseModel):
    id: int
    actor_id: Optional[int]
    actor_username: Optional[str]
    action: str
    target_type: Optional[str]
    target_id: Optional[str]
    meta_data: Optional[dict]
    correlation_id: Optional[str]
    timestamp: datetime

    class Config:
        from_attributes = True


class AuditTrailResponse(BaseModel):
    logs: List[AuditLogResponse]
    total: int
