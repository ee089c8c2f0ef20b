"""
Ledger reports built from posted journal lines.

All figures are in the base currency (amount_in_base). Draft and voided
entries are excluded.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from freight_ledger.app.core.exceptions import ResourceNotFoundError
from freight_ledger.app.domain.ledger.currency import BALANCE_TOLERANCE, money, to_decimal
from freight_ledger.app.models.chart_of_accounts import Account
from freight_ledger.app.models.journal_entry import JournalEntry, JournalLine
from freight_ledger.app.models.ledger_enums import JournalStatus, NormalBalance


@dataclass
class AccountBalance:
    account_id: int
    account_code: str
    account_name: str
    normal_balance: NormalBalance
    total_debit: Decimal
    total_credit: Decimal

    @property
    def balance(self) -> Decimal:
        """Positive when the account sits on its normal side."""
        if self.normal_balance == NormalBalance.DEBIT:
            return self.total_debit - self.total_credit
        return self.total_credit - self.total_debit


@dataclass
class TrialBalance:
    as_of: Optional[date]
    rows: List[AccountBalance] = field(default_factory=list)

    @property
    def total_debit(self) -> Decimal:
        return sum((row.total_debit for row in self.rows), Decimal("0.00"))

    @property
    def total_credit(self) -> Decimal:
        return sum((row.total_credit for row in self.rows), Decimal("0.00"))

    @property
    def is_balanced(self) -> bool:
        return abs(self.total_debit - self.total_credit) < BALANCE_TOLERANCE


def _totals_query(as_of: Optional[date] = None):
    debit = func.coalesce(
        func.sum(case((JournalLine.debit_amount > 0, JournalLine.amount_in_base), else_=0)), 0
    )
    credit = func.coalesce(
        func.sum(case((JournalLine.credit_amount > 0, JournalLine.amount_in_base), else_=0)), 0
    )
    query = (
        select(
            Account.id,
            Account.account_code,
            Account.account_name,
            Account.normal_balance,
            debit.label("total_debit"),
            credit.label("total_credit"),
        )
        .join(JournalLine, JournalLine.account_id == Account.id)
        .join(JournalEntry, JournalEntry.id == JournalLine.journal_entry_id)
        .where(JournalEntry.status == JournalStatus.POSTED)
        .group_by(Account.id, Account.account_code, Account.account_name, Account.normal_balance)
        .order_by(Account.account_code)
    )
    if as_of:
        query = query.where(JournalEntry.entry_date <= as_of)
    return query


def _row(row) -> AccountBalance:
    return AccountBalance(
        account_id=row.id,
        account_code=row.account_code,
        account_name=row.account_name,
        normal_balance=row.normal_balance,
        total_debit=money(to_decimal(row.total_debit)),
        total_credit=money(to_decimal(row.total_credit)),
    )


async def trial_balance(db: AsyncSession, as_of: Optional[date] = None) -> TrialBalance:
    """Per-account debit/credit totals of posted entries; accounts without activity are omitted."""
    result = await db.execute(_totals_query(as_of))
    return TrialBalance(as_of=as_of, rows=[_row(row) for row in result.all()])


async def account_balance(
    db: AsyncSession, account_id: int, as_of: Optional[date] = None
) -> AccountBalance:
    account = await db.get(Account, account_id)
    if account is None:
        raise ResourceNotFoundError("Account", account_id)

    result = await db.execute(_totals_query(as_of).where(Account.id == account_id))
    row = result.first()
    if row is None:
        return AccountBalance(
            account_id=account.id,
            account_code=account.account_code,
            account_name=account.account_name,
            normal_balance=account.normal_balance,
            total_debit=Decimal("0.00"),
            total_credit=Decimal("0.00"),
        )
    return _row(row)
