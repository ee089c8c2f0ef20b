"""
User and session schemas.
"""

from pydantic import BaseModel
from datetime import datetime
from freight_ledger.app.models.enums import UserRole


class UserResponse(BaseModel):
    """A ledger user as returned by /auth/me and the admin user endpoints."""
    id: int
    email: str
    username: str
    role: UserRole
    is_active: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class LogoutResponse(BaseModel):
    success: bool
    message: str
