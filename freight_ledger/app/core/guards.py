"""
Role guards for ledger endpoints.

Usage:
    @router.post("/journal-entries")
    async def create_entry(current_user: dict = Depends(require_role(BOOKKEEPERS))):
        ...
"""

from typing import Iterable
from fastapi import Depends, HTTPException, status
from freight_ledger.app.models.enums import UserRole
from freight_ledger.app.core.dependencies import get_current_user


# Who may write to the books, and who may read them
BOOKKEEPERS = (UserRole.ADMIN, UserRole.ACCOUNTANT)
LEDGER_READERS = (UserRole.ADMIN, UserRole.ACCOUNTANT, UserRole.EMPLOYEE)


def require_role(allowed_roles: Iterable[UserRole], detail: str = None):
    """Dependency factory: 403 unless the current user's role is allowed."""
    allowed = {role.value for role in allowed_roles}
    message = detail or f"Access denied. Required role: {', '.join(sorted(allowed))}"

    async def role_checker(current_user: dict = Depends(get_current_user)) -> dict:
        if current_user["role"] not in allowed:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=message)
        return current_user

    return role_checker


# Users, chart of accounts, exchange rates
require_admin = require_role([UserRole.ADMIN], detail="Admin access required")
