"""
User roles enumeration.

Defines the role types for the freight ledger service.
"""

import enum


class UserRole(str, enum.Enum):
    """
    User role enumeration.

    Roles:
        ADMIN: Supreme user with system-level access
        ACCOUNTANT: Records, posts and reverses journal entries
        EMPLOYEE: Read-only access to the books (default role)
    """
    ADMIN = "ADMIN"
    ACCOUNTANT = "ACCOUNTANT"
    EMPLOYEE = "EMPLOYEE"
