"""
Event-specific journal entry builders.

Each builder maps one business event to an EntryDraft with exactly two
lines (one debit, one credit). Builders are pure: they never touch the
database and never look up exchange rates. record_event() hands a draft
to the JournalEntryWriter.

Accounting per event:
    invoice issued          Dr Accounts Receivable   Cr Shipping Revenue
    customer payment        Dr Cash / deposit acct   Cr Accounts Receivable
    expense approved        Dr Category expense      Cr Accounts Payable
    expense paid from bank  Dr Category expense      Cr Bank account
    agent invoice received  Dr Region agent cost     Cr Agent Payables
    agent payment made      Dr Agent Payables        Cr Cash / source acct
    agent billed            Dr Accounts Receivable   Cr Shipping Revenue
"""

from datetime import date
from decimal import Decimal
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from freight_ledger.app.core.config import settings
from freight_ledger.app.domain.ledger.account_codes import (
    AccountCodes,
    agent_cost_account_for,
    cash_account_for,
    expense_account_for,
)
from freight_ledger.app.domain.ledger.account_resolver import AccountRef, ByCode, ById
from freight_ledger.app.domain.ledger.currency import effective_rate, rate_from_base_amount
from freight_ledger.app.domain.ledger.journal_writer import (
    EntryDraft,
    JournalEntryWriter,
    JournalLineDraft,
)
from freight_ledger.app.models.journal_entry import JournalEntry
from freight_ledger.app.models.ledger_enums import ReferenceType


def _pair(
    *,
    description: str,
    reference_type: ReferenceType,
    reference_id: str,
    debit: AccountRef,
    debit_description: str,
    credit: AccountRef,
    credit_description: str,
    amount,
    currency: str,
    exchange_rate,
    amount_in_base=None,
) -> EntryDraft:
    rate = effective_rate(currency, exchange_rate)
    return EntryDraft(
        description=description,
        reference_type=reference_type,
        reference_id=str(reference_id),
        auto_post=True,
        lines=[
            JournalLineDraft(
                account=debit,
                description=debit_description,
                debit_amount=amount,
                currency=currency,
                exchange_rate=rate,
                amount_in_base=amount_in_base,
            ),
            JournalLineDraft(
                account=credit,
                description=credit_description,
                credit_amount=amount,
                currency=currency,
                exchange_rate=rate,
                amount_in_base=amount_in_base,
            ),
        ],
    )


def invoice_issued(
    *,
    invoice_id,
    invoice_number: str,
    amount,
    currency: str,
    exchange_rate=1,
    customer_name: Optional[str] = None,
) -> EntryDraft:
    customer = f" to {customer_name}" if customer_name else ""
    return _pair(
        description=f"Invoice {invoice_number} issued{customer}",
        reference_type=ReferenceType.INVOICE,
        reference_id=invoice_id,
        debit=ByCode(AccountCodes.ACCOUNTS_RECEIVABLE),
        debit_description=f"AR - Invoice {invoice_number}",
        credit=ByCode(AccountCodes.SHIPPING_REVENUE),
        credit_description=f"Revenue - Invoice {invoice_number}",
        amount=amount,
        currency=currency,
        exchange_rate=exchange_rate,
    )


def invoice_payment_received(
    *,
    invoice_id,
    invoice_number: str,
    amount,
    currency: str,
    exchange_rate=1,
    payment_currency: Optional[str] = None,
    deposit_account_id: Optional[int] = None,
) -> EntryDraft:
    """
    Customer pays an invoice.

    The cash side is the deposit account the user picked, or else the bank
    account matching the payment currency.
    """
    settle_currency = payment_currency or currency
    cash = ById(deposit_account_id) if deposit_account_id else ByCode(cash_account_for(settle_currency))
    return _pair(
        description=f"Payment received for Invoice {invoice_number}",
        reference_type=ReferenceType.PAYMENT,
        reference_id=invoice_id,
        debit=cash,
        debit_description=f"Cash received - Invoice {invoice_number}",
        credit=ByCode(AccountCodes.ACCOUNTS_RECEIVABLE),
        credit_description=f"Clear AR - Invoice {invoice_number}",
        amount=amount,
        currency=settle_currency,
        exchange_rate=exchange_rate,
    )


def expense_approved(
    *,
    expense_id,
    category: str,
    amount,
    currency: str,
    description: Optional[str] = None,
    exchange_rate=1,
) -> EntryDraft:
    """Accrual: the expense is recognised and owed through Accounts Payable."""
    label = description or category
    return _pair(
        description=f"Expense approved: {label}",
        reference_type=ReferenceType.EXPENSE,
        reference_id=expense_id,
        debit=ByCode(expense_account_for(category)),
        debit_description=description or f"{category} expense",
        credit=ByCode(AccountCodes.ACCOUNTS_PAYABLE),
        credit_description=f"Payable for expense: {label}",
        amount=amount,
        currency=currency,
        exchange_rate=exchange_rate,
    )


def expense_paid(
    *,
    expense_id,
    category: str,
    amount,
    currency: str,
    bank_account_id: int,
    description: Optional[str] = None,
    exchange_rate=1,
) -> EntryDraft:
    """Expense paid straight from a bank account, bypassing Accounts Payable."""
    label = description or category
    return _pair(
        description=f"Expense paid: {label}",
        reference_type=ReferenceType.EXPENSE,
        reference_id=expense_id,
        debit=ByCode(expense_account_for(category)),
        debit_description=description or f"{category} expense",
        credit=ById(bank_account_id),
        credit_description=f"Paid from bank - {label}",
        amount=amount,
        currency=currency,
        exchange_rate=exchange_rate,
    )


def agent_invoice_received(
    *,
    invoice_id,
    invoice_number: str,
    amount,
    currency: str,
    exchange_rate=1,
    agent_name: Optional[str] = None,
    origin_region: Optional[str] = None,
) -> EntryDraft:
    """An agent bills us: cost in the agent's region, liability to the agent."""
    agent = f" from {agent_name}" if agent_name else ""
    return _pair(
        description=f"Agent invoice {invoice_number}{agent}",
        reference_type=ReferenceType.INVOICE,
        reference_id=invoice_id,
        debit=ByCode(agent_cost_account_for(origin_region)),
        debit_description=f"Agent cost - Invoice {invoice_number}",
        credit=ByCode(AccountCodes.AGENT_PAYABLES),
        credit_description=f"Payable to agent - Invoice {invoice_number}",
        amount=amount,
        currency=currency,
        exchange_rate=exchange_rate,
    )


def agent_payment_made(
    *,
    invoice_id,
    invoice_number: str,
    amount,
    currency: str,
    exchange_rate=1,
    payment_currency: Optional[str] = None,
    source_account_id: Optional[int] = None,
    amount_in_base=None,
) -> EntryDraft:
    """
    We pay an agent, clearing the payable.

    When the settled base-currency amount is known the rate is derived
    from it rather than taken from the caller, and both lines store that
    amount exactly.
    """
    settle_currency = payment_currency or currency
    foreign = settle_currency.upper() != settings.base_currency.upper()
    if foreign and amount_in_base and Decimal(str(amount)):
        rate = rate_from_base_amount(amount, amount_in_base)
    else:
        rate = exchange_rate
        amount_in_base = None
    cash = ById(source_account_id) if source_account_id else ByCode(cash_account_for(settle_currency))
    return _pair(
        description=f"Payment to agent for Invoice {invoice_number}",
        reference_type=ReferenceType.PAYMENT,
        reference_id=invoice_id,
        debit=ByCode(AccountCodes.AGENT_PAYABLES),
        debit_description=f"Clear agent payable - Invoice {invoice_number}",
        credit=cash,
        credit_description=f"Payment to agent - Invoice {invoice_number}",
        amount=amount,
        currency=settle_currency,
        exchange_rate=rate,
        amount_in_base=amount_in_base,
    )


def agent_billing(
    *,
    invoice_id,
    invoice_number: str,
    amount,
    currency: str,
    exchange_rate=1,
    agent_name: Optional[str] = None,
) -> EntryDraft:
    """We bill an agent for clearing services: receivable and revenue."""
    agent = f" to {agent_name}" if agent_name else ""
    return _pair(
        description=f"Agent invoice {invoice_number}{agent} (clearing services)",
        reference_type=ReferenceType.INVOICE,
        reference_id=invoice_id,
        debit=ByCode(AccountCodes.ACCOUNTS_RECEIVABLE),
        debit_description=f"Receivable from agent - Invoice {invoice_number}",
        credit=ByCode(AccountCodes.SHIPPING_REVENUE),
        credit_description=f"Clearing service revenue - Invoice {invoice_number}",
        amount=amount,
        currency=currency,
        exchange_rate=exchange_rate,
    )


async def record_event(
    db: AsyncSession,
    draft: EntryDraft,
    *,
    actor_id: Optional[int],
    strict: Optional[bool] = None,
    entry_date: Optional[date] = None,
) -> JournalEntry:
    """
    Persist a builder's draft. No dedup: recording the same event twice
    writes two entries.
    """
    writer = JournalEntryWriter(db, actor_id, strict=strict)
    return await writer.write(draft, entry_date=entry_date)
