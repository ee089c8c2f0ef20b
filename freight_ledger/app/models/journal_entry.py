"""
Journal Entry and Journal Line database models.

Double-entry bookkeeping records. A posted entry is never updated;
corrections are made with an offsetting reversal entry.
"""

from sqlalchemy import (
    Column, Integer, String, Text, Date, DateTime, Numeric, ForeignKey, Enum, CheckConstraint
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from freight_ledger.app.db.session import Base
from freight_ledger.app.models.ledger_enums import JournalStatus, ReferenceType


class JournalEntry(Base):
    """
    Journal entry header.

    Groups the balanced debit/credit lines that record one business event.
    Lifecycle: DRAFT -> POSTED, or DRAFT -> VOIDED.
    """
    __tablename__ = "journal_entries"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    entry_number = Column(String(32), unique=True, index=True, nullable=False)
    entry_date = Column(Date, nullable=False)
    description = Column(Text, nullable=False)

    # Linkage to the originating business record (invoice, expense, ...)
    reference_type = Column(Enum(ReferenceType), nullable=True, index=True)
    reference_id = Column(String(64), nullable=True, index=True)

    status = Column(Enum(JournalStatus), default=JournalStatus.DRAFT, nullable=False, index=True)
    posted_at = Column(DateTime(timezone=True), nullable=True)
    posted_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)

    reversal_of_id = Column(Integer, ForeignKey("journal_entries.id"), nullable=True, unique=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    lines = relationship(
        "JournalLine",
        back_populates="journal_entry",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="JournalLine.id",
    )

    def __repr__(self):
        return f"<JournalEntry(number='{self.entry_number}', status='{self.status.value}')>"


class JournalLine(Base):
    """
    A single debit or credit movement against one account.

    amount_in_base = (debit_amount or credit_amount) * exchange_rate
    """
    __tablename__ = "journal_lines"
    __table_args__ = (
        CheckConstraint(
            "(debit_amount > 0 AND credit_amount = 0) OR "
            "(credit_amount > 0 AND debit_amount = 0) OR "
            "(debit_amount = 0 AND credit_amount = 0)",
            name="debit_or_credit",
        ),
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    journal_entry_id = Column(
        Integer, ForeignKey("journal_entries.id", ondelete="CASCADE"), nullable=False, index=True
    )
    account_id = Column(Integer, ForeignKey("chart_of_accounts.id"), nullable=False, index=True)
    description = Column(Text, nullable=True)

    debit_amount = Column(Numeric(18, 2), default=0, nullable=False)
    credit_amount = Column(Numeric(18, 2), default=0, nullable=False)
    currency = Column(String(3), default="TZS", nullable=False)
    exchange_rate = Column(Numeric(18, 6), default=1, nullable=False)
    amount_in_base = Column(Numeric(18, 2), nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    journal_entry = relationship("JournalEntry", back_populates="lines")

    def __repr__(self):
        side = "DR" if self.debit_amount else "CR"
        amount = self.debit_amount or self.credit_amount
        return f"<JournalLine(account={self.account_id}, {side} {amount} {self.currency})>"
