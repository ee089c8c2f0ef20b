"""
Journal Entry API Endpoints.

Browse the journal, compose manual entries and drive the
draft -> posted / voided lifecycle. Posted entries are corrected by
reversal only.
"""

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from freight_ledger.app.db.session import get_db
from freight_ledger.app.core.guards import require_role, BOOKKEEPERS, LEDGER_READERS
from freight_ledger.app.domain.ledger import journal_lifecycle
from freight_ledger.app.domain.ledger.account_resolver import ById
from freight_ledger.app.domain.ledger.journal_writer import JournalLineDraft, load_entry
from freight_ledger.app.models.ledger_enums import JournalStatus, ReferenceType
from freight_ledger.app.schemas.ledger import (
    JournalEntryResponse,
    ManualJournalEntryCreate,
    ReverseRequest,
)
from freight_ledger.app.services.audit import log_user_action, AuditAction

router = APIRouter(prefix="/journal-entries", tags=["Ledger - Journal Entries"])


@router.get("", response_model=List[JournalEntryResponse])
async def list_journal_entries(
    entry_status: Optional[JournalStatus] = Query(default=None, alias="status"),
    reference_type: Optional[ReferenceType] = None,
    reference_id: Optional[str] = None,
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    current_user: dict = Depends(require_role(LEDGER_READERS)),
    db: AsyncSession = Depends(get_db)
):
    """
    List journal entries, newest first.
    """
    return await journal_lifecycle.list_entries(
        db,
        status=entry_status,
        reference_type=reference_type,
        reference_id=reference_id,
        limit=limit,
        offset=offset,
    )


@router.get("/{entry_id}", response_model=JournalEntryResponse)
async def get_journal_entry(
    entry_id: int = Path(..., description="Journal entry ID"),
    current_user: dict = Depends(require_role(LEDGER_READERS)),
    db: AsyncSession = Depends(get_db)
):
    return await load_entry(db, entry_id)


@router.post("", response_model=JournalEntryResponse, status_code=status.HTTP_201_CREATED)
async def create_manual_entry(
    payload: ManualJournalEntryCreate,
    current_user: dict = Depends(require_role(BOOKKEEPERS)),
    db: AsyncSession = Depends(get_db)
):
    """
    Create a manual journal entry.

    Lines reference accounts by ID and must balance in base currency.
    Saved as a draft unless auto_post is set.
    """
    entry = await journal_lifecycle.create_manual_entry(
        db,
        actor_id=current_user["user_id"],
        description=payload.description,
        reference_type=payload.reference_type,
        reference_id=payload.reference_id,
        entry_date=payload.entry_date,
        notes=payload.notes,
        auto_post=payload.auto_post,
        lines=[
            JournalLineDraft(
                account=ById(line.account_id),
                description=line.description or payload.description,
                debit_amount=line.debit_amount,
                credit_amount=line.credit_amount,
                currency=line.currency or "",
                exchange_rate=line.exchange_rate,
            )
            for line in payload.lines
        ],
    )
    response = JournalEntryResponse.model_validate(entry)

    await log_user_action(
        db=db,
        current_user=current_user,
        action=AuditAction.JOURNAL_ENTRY_CREATED,
        target_type="journal_entry",
        target_id=entry.id,
        metadata={"entry_number": entry.entry_number, "manual": True, "status": entry.status.value},
    )
    return response


@router.post("/{entry_id}/post", response_model=JournalEntryResponse)
async def post_journal_entry(
    entry_id: int = Path(..., description="Journal entry ID"),
    current_user: dict = Depends(require_role(BOOKKEEPERS)),
    db: AsyncSession = Depends(get_db)
):
    """
    Post a DRAFT entry. Once posted it can no longer be edited or voided.
    """
    entry = await journal_lifecycle.post_entry(db, entry_id, current_user["user_id"])
    response = JournalEntryResponse.model_validate(entry)

    await log_user_action(
        db=db,
        current_user=current_user,
        action=AuditAction.JOURNAL_ENTRY_POSTED,
        target_type="journal_entry",
        target_id=entry.id,
        metadata={"entry_number": entry.entry_number},
    )
    return response


@router.post("/{entry_id}/void", response_model=JournalEntryResponse)
async def void_journal_entry(
    entry_id: int = Path(..., description="Journal entry ID"),
    current_user: dict = Depends(require_role(BOOKKEEPERS)),
    db: AsyncSession = Depends(get_db)
):
    """
    Void a DRAFT entry.
    """
    entry = await journal_lifecycle.void_entry(db, entry_id, current_user["user_id"])
    response = JournalEntryResponse.model_validate(entry)

    await log_user_action(
        db=db,
        current_user=current_user,
        action=AuditAction.JOURNAL_ENTRY_VOIDED,
        target_type="journal_entry",
        target_id=entry.id,
        metadata={"entry_number": entry.entry_number},
    )
    return response


@router.post("/{entry_id}/reverse", response_model=JournalEntryResponse, status_code=status.HTTP_201_CREATED)
async def reverse_journal_entry(
    entry_id: int = Path(..., description="Journal entry ID"),
    payload: Optional[ReverseRequest] = None,
    current_user: dict = Depends(require_role(BOOKKEEPERS)),
    db: AsyncSession = Depends(get_db)
):
    """
    Reverse a POSTED entry with a new, offsetting posted entry.

    Returns the reversal entry.
    """
    payload = payload or ReverseRequest()
    reversal = await journal_lifecycle.reverse_entry(
        db,
        entry_id,
        current_user["user_id"],
        description=payload.description,
        entry_date=payload.entry_date,
    )
    response = JournalEntryResponse.model_validate(reversal)

    await log_user_action(
        db=db,
        current_user=current_user,
        action=AuditAction.JOURNAL_ENTRY_REVERSED,
        target_type="journal_entry",
        target_id=entry_id,
        metadata={"reversal_id": reversal.id, "reversal_number": reversal.entry_number},
    )
    return response
