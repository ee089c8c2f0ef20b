"""
Ledger Event API Endpoints.

One endpoint per business event. Each writes a posted journal entry on
behalf of the authenticated bookkeeper.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from freight_ledger.app.db.session import get_db
from freight_ledger.app.core.guards import require_role, BOOKKEEPERS
from freight_ledger.app.domain.ledger import entry_builders
from freight_ledger.app.domain.ledger.entry_builders import record_event
from freight_ledger.app.domain.ledger.journal_writer import EntryDraft
from freight_ledger.app.schemas.ledger import (
    AgentBillingEvent,
    AgentInvoiceReceivedEvent,
    AgentPaymentEvent,
    ExpenseApprovedEvent,
    ExpensePaidEvent,
    InvoiceIssuedEvent,
    InvoicePaymentEvent,
    JournalEntryResponse,
)
from freight_ledger.app.services.audit import log_user_action, AuditAction
from freight_ledger.app.services.exchange_rate_service import ExchangeRateService

router = APIRouter(prefix="/ledger/events", tags=["Ledger - Events"])


async def _record(
    db: AsyncSession, draft: EntryDraft, current_user: dict, event: str, entry_date=None
) -> JournalEntryResponse:
    entry = await record_event(db, draft, actor_id=current_user["user_id"], entry_date=entry_date)
    response = JournalEntryResponse.model_validate(entry)

    await log_user_action(
        db=db,
        current_user=current_user,
        action=AuditAction.JOURNAL_ENTRY_CREATED,
        target_type="journal_entry",
        target_id=entry.id,
        metadata={
            "event": event,
            "entry_number": entry.entry_number,
            "reference_type": draft.reference_type.value,
            "reference_id": draft.reference_id,
        },
    )
    return response


@router.post("/invoice-issued", response_model=JournalEntryResponse, status_code=status.HTTP_201_CREATED)
async def invoice_issued(
    event: InvoiceIssuedEvent,
    current_user: dict = Depends(require_role(BOOKKEEPERS)),
    db: AsyncSession = Depends(get_db)
):
    """Dr Accounts Receivable, Cr Shipping Revenue."""
    draft = entry_builders.invoice_issued(
        invoice_id=event.invoice_id,
        invoice_number=event.invoice_number,
        amount=event.amount,
        currency=event.currency,
        exchange_rate=await ExchangeRateService.resolve_rate(db, event.currency, event.exchange_rate),
        customer_name=event.customer_name,
    )
    return await _record(db, draft, current_user, "invoice_issued", event.entry_date)


@router.post("/invoice-payment", response_model=JournalEntryResponse, status_code=status.HTTP_201_CREATED)
async def invoice_payment(
    event: InvoicePaymentEvent,
    current_user: dict = Depends(require_role(BOOKKEEPERS)),
    db: AsyncSession = Depends(get_db)
):
    """Dr Cash (deposit account or currency bank account), Cr Accounts Receivable."""
    settle_currency = event.payment_currency or event.currency
    draft = entry_builders.invoice_payment_received(
        invoice_id=event.invoice_id,
        invoice_number=event.invoice_number,
        amount=event.amount,
        currency=event.currency,
        exchange_rate=await ExchangeRateService.resolve_rate(db, settle_currency, event.exchange_rate),
        payment_currency=event.payment_currency,
        deposit_account_id=event.deposit_account_id,
    )
    return await _record(db, draft, current_user, "invoice_payment", event.entry_date)


@router.post("/expense-approved", response_model=JournalEntryResponse, status_code=status.HTTP_201_CREATED)
async def expense_approved(
    event: ExpenseApprovedEvent,
    current_user: dict = Depends(require_role(BOOKKEEPERS)),
    db: AsyncSession = Depends(get_db)
):
    """Dr category expense, Cr Accounts Payable."""
    draft = entry_builders.expense_approved(
        expense_id=event.expense_id,
        category=event.category,
        amount=event.amount,
        currency=event.currency,
        description=event.description,
        exchange_rate=await ExchangeRateService.resolve_rate(db, event.currency, event.exchange_rate),
    )
    return await _record(db, draft, current_user, "expense_approved", event.entry_date)


@router.post("/expense-paid", response_model=JournalEntryResponse, status_code=status.HTTP_201_CREATED)
async def expense_paid(
    event: ExpensePaidEvent,
    current_user: dict = Depends(require_role(BOOKKEEPERS)),
    db: AsyncSession = Depends(get_db)
):
    """Dr category expense, Cr the bank account it was paid from."""
    draft = entry_builders.expense_paid(
        expense_id=event.expense_id,
        category=event.category,
        amount=event.amount,
        currency=event.currency,
        bank_account_id=event.bank_account_id,
        description=event.description,
        exchange_rate=await ExchangeRateService.resolve_rate(db, event.currency, event.exchange_rate),
    )
    return await _record(db, draft, current_user, "expense_paid", event.entry_date)


@router.post("/agent-invoice-received", response_model=JournalEntryResponse, status_code=status.HTTP_201_CREATED)
async def agent_invoice_received(
    event: AgentInvoiceReceivedEvent,
    current_user: dict = Depends(require_role(BOOKKEEPERS)),
    db: AsyncSession = Depends(get_db)
):
    """Dr regional agent cost, Cr Agent Payables."""
    draft = entry_builders.agent_invoice_received(
        invoice_id=event.invoice_id,
        invoice_number=event.invoice_number,
        amount=event.amount,
        currency=event.currency,
        exchange_rate=await ExchangeRateService.resolve_rate(db, event.currency, event.exchange_rate),
        agent_name=event.agent_name,
        origin_region=event.origin_region,
    )
    return await _record(db, draft, current_user, "agent_invoice_received", event.entry_date)


@router.post("/agent-payment", response_model=JournalEntryResponse, status_code=status.HTTP_201_CREATED)
async def agent_payment(
    event: AgentPaymentEvent,
    current_user: dict = Depends(require_role(BOOKKEEPERS)),
    db: AsyncSession = Depends(get_db)
):
    """Dr Agent Payables, Cr Cash (source account or currency bank account)."""
    settle_currency = event.payment_currency or event.currency
    # A known settled base amount fixes the rate; no lookup needed
    rate = event.exchange_rate
    if event.amount_in_base is None:
        rate = await ExchangeRateService.resolve_rate(db, settle_currency, event.exchange_rate)

    draft = entry_builders.agent_payment_made(
        invoice_id=event.invoice_id,
        invoice_number=event.invoice_number,
        amount=event.amount,
        currency=event.currency,
        exchange_rate=rate,
        payment_currency=event.payment_currency,
        source_account_id=event.source_account_id,
        amount_in_base=event.amount_in_base,
    )
    return await _record(db, draft, current_user, "agent_payment", event.entry_date)


@router.post("/agent-billing", response_model=JournalEntryResponse, status_code=status.HTTP_201_CREATED)
async def agent_billing(
    event: AgentBillingEvent,
    current_user: dict = Depends(require_role(BOOKKEEPERS)),
    db: AsyncSession = Depends(get_db)
):
    """Dr Accounts Receivable, Cr Shipping Revenue (clearing services billed to an agent)."""
    draft = entry_builders.agent_billing(
        invoice_id=event.invoice_id,
        invoice_number=event.invoice_number,
        amount=event.amount,
        currency=event.currency,
        exchange_rate=await ExchangeRateService.resolve_rate(db, event.currency, event.exchange_rate),
        agent_name=event.agent_name,
    )
    return await _record(db, draft, current_user, "agent_billing", event.entry_date)
