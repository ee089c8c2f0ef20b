"""
Ledger enumerations.
"""

import enum


class JournalStatus(str, enum.Enum):
    """Journal entry status enumeration."""
    DRAFT = "draft"  # Editable by the accountant, not yet in the books
    POSTED = "posted"  # In the books, immutable
    VOIDED = "voided"  # Abandoned draft


class ReferenceType(str, enum.Enum):
    """Kind of business record a journal entry originates from."""
    INVOICE = "invoice"
    PAYMENT = "payment"
    EXPENSE = "expense"
    ADJUSTMENT = "adjustment"
    OPENING_BALANCE = "opening_balance"


class AccountType(str, enum.Enum):
    """Chart of accounts top-level classification."""
    ASSET = "asset"
    LIABILITY = "liability"
    EQUITY = "equity"
    REVENUE = "revenue"
    EXPENSE = "expense"


class NormalBalance(str, enum.Enum):
    """Side on which an account's balance normally increases."""
    DEBIT = "debit"
    CREDIT = "credit"
