"""
Journal entry lifecycle.

Status transitions after an entry is written:
    DRAFT  -> POSTED   (post_entry)
    DRAFT  -> VOIDED   (void_entry)
Posted entries are never modified. reverse_entry corrects one by writing
a new posted adjustment entry with every line's side swapped.
"""

import logging
from datetime import date, datetime, timezone
from typing import List, Optional

from sqlalchemy import select, desc
from sqlalchemy.ext.asyncio import AsyncSession

from freight_ledger.app.core.exceptions import JournalStateError
from freight_ledger.app.domain.ledger.account_resolver import ById
from freight_ledger.app.domain.ledger.journal_writer import (
    EntryDraft,
    JournalEntryWriter,
    JournalLineDraft,
    load_entry,
)
from freight_ledger.app.models.journal_entry import JournalEntry
from freight_ledger.app.models.ledger_enums import JournalStatus, ReferenceType

logger = logging.getLogger(__name__)


async def list_entries(
    db: AsyncSession,
    status: Optional[JournalStatus] = None,
    reference_type: Optional[ReferenceType] = None,
    reference_id: Optional[str] = None,
    limit: int = 100,
    offset: int = 0,
) -> List[JournalEntry]:
    """Most recent entries first, optionally filtered."""
    query = select(JournalEntry).order_by(desc(JournalEntry.entry_date), desc(JournalEntry.id))

    if status:
        query = query.where(JournalEntry.status == status)
    if reference_type:
        query = query.where(JournalEntry.reference_type == reference_type)
    if reference_id:
        query = query.where(JournalEntry.reference_id == reference_id)

    result = await db.execute(query.limit(limit).offset(offset))
    return result.scalars().all()


async def create_manual_entry(
    db: AsyncSession,
    *,
    actor_id: int,
    description: str,
    reference_type: ReferenceType,
    reference_id: Optional[str],
    lines: List[JournalLineDraft],
    auto_post: bool = False,
    entry_date: Optional[date] = None,
    notes: Optional[str] = None,
) -> JournalEntry:
    """
    Accountant-composed entry. Always strict: every account must exist.
    """
    draft = EntryDraft(
        description=description,
        reference_type=reference_type,
        reference_id=reference_id,
        lines=lines,
        auto_post=auto_post,
        notes=notes,
    )
    return await JournalEntryWriter(db, actor_id, strict=True).write(draft, entry_date=entry_date)


async def post_entry(db: AsyncSession, entry_id: int, actor_id: int) -> JournalEntry:
    entry = await load_entry(db, entry_id)
    if entry.status != JournalStatus.DRAFT:
        raise JournalStateError(
            f"Only draft entries can be posted (entry is {entry.status.value})",
            details={"entry_id": entry_id, "status": entry.status.value},
        )

    entry.status = JournalStatus.POSTED
    entry.posted_at = datetime.now(timezone.utc)
    entry.posted_by = actor_id
    await db.commit()

    logger.info("Journal entry %s posted by user %s", entry.entry_number, actor_id)
    return await load_entry(db, entry_id)


async def void_entry(db: AsyncSession, entry_id: int, actor_id: int) -> JournalEntry:
    entry = await load_entry(db, entry_id)
    if entry.status != JournalStatus.DRAFT:
        raise JournalStateError(
            f"Only draft entries can be voided (entry is {entry.status.value}); reverse posted entries instead",
            details={"entry_id": entry_id, "status": entry.status.value},
        )

    entry.status = JournalStatus.VOIDED
    await db.commit()

    logger.info("Journal entry %s voided by user %s", entry.entry_number, actor_id)
    return await load_entry(db, entry_id)


async def reverse_entry(
    db: AsyncSession,
    entry_id: int,
    actor_id: int,
    description: Optional[str] = None,
    entry_date: Optional[date] = None,
) -> JournalEntry:
    """
    Offset a posted entry with a new posted entry.

    Same accounts, currencies, rates and base amounts; debits become
    credits and vice versa. An entry can be reversed once.
    """
    original = await load_entry(db, entry_id)
    if original.status != JournalStatus.POSTED:
        raise JournalStateError(
            f"Only posted entries can be reversed (entry is {original.status.value})",
            details={"entry_id": entry_id, "status": original.status.value},
        )

    existing = await db.execute(select(JournalEntry.id).where(JournalEntry.reversal_of_id == entry_id))
    reversal_id = existing.scalar_one_or_none()
    if reversal_id is not None:
        raise JournalStateError(
            f"Entry {original.entry_number} has already been reversed",
            details={"entry_id": entry_id, "reversal_id": reversal_id},
        )

    draft = EntryDraft(
        description=description or f"Reversal of {original.entry_number}: {original.description}",
        reference_type=ReferenceType.ADJUSTMENT,
        reference_id=str(original.id),
        auto_post=True,
        reversal_of_id=original.id,
        lines=[
            JournalLineDraft(
                account=ById(line.account_id),
                description=f"Reversal - {line.description or original.entry_number}",
                debit_amount=line.credit_amount,
                credit_amount=line.debit_amount,
                currency=line.currency,
                exchange_rate=line.exchange_rate,
                amount_in_base=line.amount_in_base,
            )
            for line in original.lines
        ],
    )
    reversal = await JournalEntryWriter(db, actor_id, strict=True).write(draft, entry_date=entry_date)

    logger.info("Journal entry %s reversed by %s", original.entry_number, reversal.entry_number)
    return reversal
