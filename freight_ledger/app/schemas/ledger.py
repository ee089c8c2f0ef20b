"""
Ledger Schemas.

Request bodies for business events and manual entries, and response
models for journal entries, accounts and reports. Money is Decimal
end to end.
"""

from pydantic import BaseModel, Field, field_validator
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, List
from freight_ledger.app.models.ledger_enums import (
    AccountType,
    JournalStatus,
    NormalBalance,
    ReferenceType,
)


def _upper(value: Optional[str]) -> Optional[str]:
    return value.upper() if value else value


# Business events

class LedgerEventBase(BaseModel):
    """Fields shared by every business event."""
    amount: Decimal = Field(..., gt=0, description="Amount in the transaction currency")
    currency: str = Field(..., min_length=3, max_length=3, description="ISO currency code")
    exchange_rate: Optional[Decimal] = Field(
        default=None, gt=0, description="Base-currency units per unit; looked up when omitted"
    )
    entry_date: Optional[date] = None

    _normalize_currency = field_validator("currency")(_upper)


class InvoiceIssuedEvent(LedgerEventBase):
    invoice_id: str = Field(..., min_length=1, max_length=64)
    invoice_number: str = Field(..., min_length=1, max_length=50)
    customer_name: Optional[str] = None


class InvoicePaymentEvent(LedgerEventBase):
    """Customer payment. deposit_account_id overrides the currency's bank account."""
    invoice_id: str = Field(..., min_length=1, max_length=64)
    invoice_number: str = Field(..., min_length=1, max_length=50)
    payment_currency: Optional[str] = Field(default=None, min_length=3, max_length=3)
    deposit_account_id: Optional[int] = None

    _normalize_payment_currency = field_validator("payment_currency")(_upper)


class ExpenseApprovedEvent(LedgerEventBase):
    expense_id: str = Field(..., min_length=1, max_length=64)
    category: str = Field(..., min_length=1, max_length=50)
    description: Optional[str] = None


class ExpensePaidEvent(LedgerEventBase):
    expense_id: str = Field(..., min_length=1, max_length=64)
    category: str = Field(..., min_length=1, max_length=50)
    bank_account_id: int
    description: Optional[str] = None


class AgentInvoiceReceivedEvent(LedgerEventBase):
    invoice_id: str = Field(..., min_length=1, max_length=64)
    invoice_number: str = Field(..., min_length=1, max_length=50)
    agent_name: Optional[str] = None
    origin_region: Optional[str] = Field(default=None, description="europe, dubai, china, india, usa, uk")


class AgentPaymentEvent(LedgerEventBase):
    """Payment to an agent. amount_in_base, when known, fixes the rate."""
    invoice_id: str = Field(..., min_length=1, max_length=64)
    invoice_number: str = Field(..., min_length=1, max_length=50)
    payment_currency: Optional[str] = Field(default=None, min_length=3, max_length=3)
    source_account_id: Optional[int] = None
    amount_in_base: Optional[Decimal] = Field(default=None, gt=0)

    _normalize_payment_currency = field_validator("payment_currency")(_upper)


class AgentBillingEvent(LedgerEventBase):
    invoice_id: str = Field(..., min_length=1, max_length=64)
    invoice_number: str = Field(..., min_length=1, max_length=50)
    agent_name: Optional[str] = None


# Manual entries

class JournalLineIn(BaseModel):
    """One line of a manual entry; exactly one of debit/credit must be positive."""
    account_id: int
    description: Optional[str] = None
    debit_amount: Decimal = Field(default=Decimal("0"), ge=0)
    credit_amount: Decimal = Field(default=Decimal("0"), ge=0)
    currency: Optional[str] = Field(default=None, min_length=3, max_length=3)
    exchange_rate: Decimal = Field(default=Decimal("1"), gt=0)

    _normalize_currency = field_validator("currency")(_upper)


class ManualJournalEntryCreate(BaseModel):
    description: str = Field(..., min_length=1)
    reference_type: ReferenceType = ReferenceType.ADJUSTMENT
    reference_id: Optional[str] = Field(default=None, max_length=64)
    entry_date: Optional[date] = None
    notes: Optional[str] = None
    auto_post: bool = False
    lines: List[JournalLineIn] = Field(..., min_length=2)


class ReverseRequest(BaseModel):
    description: Optional[str] = None
    entry_date: Optional[date] = None


class JournalLineResponse(BaseModel):
    id: int
    account_id: int
    description: Optional[str]
    debit_amount: Decimal
    credit_amount: Decimal
    currency: str
    exchange_rate: Decimal
    amount_in_base: Decimal

    class Config:
        from_attributes = True


class JournalEntryResponse(BaseModel):
    id: int
    entry_number: str
    entry_date: date
    description: str
    reference_type: Optional[ReferenceType]
    reference_id: Optional[str]
    status: JournalStatus
    posted_at: Optional[datetime]
    posted_by: Optional[int]
    created_by: Optional[int]
    reversal_of_id: Optional[int]
    notes: Optional[str]
    created_at: datetime
    lines: List[JournalLineResponse]

    class Config:
        from_attributes = True


# Chart of accounts

class AccountCreate(BaseModel):
    account_code: str = Field(..., min_length=1, max_length=20)
    account_name: str = Field(..., min_length=1, max_length=150)
    account_type: AccountType
    normal_balance: NormalBalance
    account_subtype: Optional[str] = Field(default=None, max_length=50)
    parent_id: Optional[int] = None
    description: Optional[str] = None
    currency: str = Field(default="TZS", min_length=3, max_length=3)

    _normalize_currency = field_validator("currency")(_upper)


class AccountResponse(BaseModel):
    id: int
    account_code: str
    account_name: str
    account_type: AccountType
    account_subtype: Optional[str]
    parent_id: Optional[int]
    description: Optional[str]
    is_active: bool
    normal_balance: NormalBalance
    currency: str

    class Config:
        from_attributes = True


# Reports

class AccountBalanceResponse(BaseModel):
    account_id: int
    account_code: str
    account_name: str
    normal_balance: NormalBalance
    total_debit: Decimal
    total_credit: Decimal
    balance: Decimal

    class Config:
        from_attributes = True


class TrialBalanceResponse(BaseModel):
    as_of: Optional[date]
    rows: List[AccountBalanceResponse]
    total_debit: Decimal
    total_credit: Decimal
    is_balanced: bool

    class Config:
        from_attributes = True
