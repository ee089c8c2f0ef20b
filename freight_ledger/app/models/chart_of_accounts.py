"""
Chart of Accounts database model.

The ledger addresses accounts either by their human-readable code
(e.g. "1120" for the TZS bank account) or directly by identifier.
"""

from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, ForeignKey, Enum
from sqlalchemy.sql import func
from freight_ledger.app.db.session import Base
from freight_ledger.app.models.ledger_enums import AccountType, NormalBalance


class Account(Base):
    """Chart of accounts entry."""
    __tablename__ = "chart_of_accounts"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    account_code = Column(String(20), unique=True, index=True, nullable=False)
    account_name = Column(String(150), nullable=False)
    account_type = Column(Enum(AccountType), nullable=False)
    account_subtype = Column(String(50), nullable=True)  # cash, accounts_receivable, header, ...
    parent_id = Column(Integer, ForeignKey("chart_of_accounts.id"), nullable=True)
    description = Column(Text, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    normal_balance = Column(Enum(NormalBalance), nullable=False)
    currency = Column(String(3), default="TZS", nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<Account(code='{self.account_code}', name='{self.account_name}')>"
