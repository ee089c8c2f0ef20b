"""
Journal Entry Writer.

Turns an EntryDraft (description, reference, symbolic lines) into a
persisted journal entry with resolved accounts and base-currency amounts.

Flow:
1. Validate lines (amount sides, rates, balance)
2. Resolve every account reference before anything is written
3. Issue the next sequential entry number (JE-YYYY-NNNN)
4. Insert header + lines and commit as one transaction

Any failure rolls the whole entry back, so a header is never left
without its lines.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from freight_ledger.app.core.config import settings
from freight_ledger.app.core.exceptions import (
    AccountResolutionError,
    JournalNumberError,
    LedgerValidationError,
    ResourceNotFoundError,
    UnbalancedEntryError,
)
from freight_ledger.app.domain.ledger.account_resolver import AccountRef, resolve_accounts
from freight_ledger.app.domain.ledger.currency import (
    ONE,
    RATE_PLACES,
    base_totals,
    is_balanced,
    money,
    to_base,
    to_decimal,
)
from freight_ledger.app.models.document_counter import DocumentCounter
from freight_ledger.app.models.journal_entry import JournalEntry, JournalLine
from freight_ledger.app.models.ledger_enums import JournalStatus, ReferenceType

logger = logging.getLogger(__name__)


@dataclass
class JournalLineDraft:
    """
    One symbolic debit or credit line, before account resolution.

    amount_in_base is normally derived from the rate; set it when the
    settled base amount is already known and must be stored exactly.
    """

    account: AccountRef
    description: str
    debit_amount: Decimal = Decimal("0")
    credit_amount: Decimal = Decimal("0")
    currency: str = ""
    exchange_rate: Decimal = ONE
    amount_in_base: Optional[Decimal] = None

    def __post_init__(self):
        self.debit_amount = money(self.debit_amount)
        self.credit_amount = money(self.credit_amount)
        # Stored rates hold six places; convert with the rate that is stored
        self.exchange_rate = to_decimal(self.exchange_rate).quantize(RATE_PLACES, rounding=ROUND_HALF_UP)
        if self.amount_in_base is not None:
            self.amount_in_base = money(self.amount_in_base)
        self.currency = (self.currency or settings.base_currency).upper()


@dataclass
class EntryDraft:
    """Everything needed to write one journal entry."""

    description: str
    reference_type: ReferenceType
    reference_id: Optional[str]
    lines: List[JournalLineDraft] = field(default_factory=list)
    auto_post: bool = False
    notes: Optional[str] = None
    reversal_of_id: Optional[int] = None


async def generate_journal_number(
    db: AsyncSession,
    counter_key: Optional[str] = None,
    today: Optional[date] = None,
) -> str:
    """
    Issue the next journal number, e.g. JE-2026-0042.

    The counter row is incremented with UPDATE ... RETURNING so concurrent
    callers never receive the same value. The increment belongs to the
    caller's transaction and is rolled back with it.
    """
    key = counter_key or settings.journal_counter_key
    stmt = (
        update(DocumentCounter)
        .where(DocumentCounter.counter_key == key)
        .values(counter_value=DocumentCounter.counter_value + 1)
        .returning(DocumentCounter.counter_value, DocumentCounter.prefix)
        .execution_options(synchronize_session=False)
    )
    row = (await db.execute(stmt)).first()
    if row is None:
        raise JournalNumberError(key)

    value, prefix = row
    year = (today or datetime.now(timezone.utc).date()).year
    return f"{prefix}-{year}-{value:04d}"


async def load_entry(db: AsyncSession, entry_id: int) -> JournalEntry:
    """Fetch an entry with its lines, refreshing anything already in the session."""
    result = await db.execute(
        select(JournalEntry)
        .options(selectinload(JournalEntry.lines))
        .where(JournalEntry.id == entry_id)
        .execution_options(populate_existing=True)
    )
    entry = result.scalar_one_or_none()
    if entry is None:
        raise ResourceNotFoundError("Journal entry", entry_id)
    return entry


class JournalEntryWriter:
    """
    Writes journal entries on behalf of one actor.

    strict=True (the default, see settings.ledger_strict_accounts) rejects
    an entry whose lines reference unknown accounts. strict=False keeps the
    legacy leniency: such lines are dropped with a warning and the rest of
    the entry is still written.
    """

    def __init__(
        self,
        db: AsyncSession,
        actor_id: Optional[int],
        strict: Optional[bool] = None,
        base_currency: Optional[str] = None,
    ):
        self.db = db
        self.actor_id = actor_id
        self.strict = settings.ledger_strict_accounts if strict is None else strict
        self.base_currency = (base_currency or settings.base_currency).upper()

    async def write(self, draft: EntryDraft, entry_date: Optional[date] = None) -> JournalEntry:
        """Stage and commit one entry; returns it with its lines loaded."""
        try:
            entry = await self.stage(draft, entry_date=entry_date)
            await self.db.commit()
        except Exception as e:
            await self.db.rollback()
            logger.error("Failed to create journal entry '%s': %s", draft.description, e)
            raise

        logger.info(
            "Journal entry %s created (%s %s, %d lines, %s)",
            entry.entry_number,
            draft.reference_type.value,
            draft.reference_id,
            len(entry.lines),
            entry.status.value,
        )
        return await load_entry(self.db, entry.id)

    async def stage(self, draft: EntryDraft, entry_date: Optional[date] = None) -> JournalEntry:
        """
        Add the entry and its lines to the session and flush, without committing.

        Used directly when the entry must share a transaction with other
        changes (e.g. a reversal).
        """
        self._validate(draft)

        resolved = await resolve_accounts(self.db, [line.account for line in draft.lines])
        unresolved = [line.account.label for line in draft.lines if resolved[line.account] is None]
        if unresolved:
            if self.strict:
                raise AccountResolutionError(unresolved)
            for label in unresolved:
                logger.warning("Account not found for: %s", label)

        entry_number = await generate_journal_number(self.db)

        now = datetime.now(timezone.utc)
        entry = JournalEntry(
            entry_number=entry_number,
            entry_date=entry_date or now.date(),
            description=draft.description,
            reference_type=draft.reference_type,
            reference_id=draft.reference_id,
            status=JournalStatus.POSTED if draft.auto_post else JournalStatus.DRAFT,
            posted_at=now if draft.auto_post else None,
            posted_by=self.actor_id if draft.auto_post else None,
            created_by=self.actor_id,
            reversal_of_id=draft.reversal_of_id,
            notes=draft.notes,
        )
        entry.lines = [
            JournalLine(
                account_id=resolved[line.account],
                description=line.description,
                debit_amount=line.debit_amount,
                credit_amount=line.credit_amount,
                currency=line.currency,
                exchange_rate=line.exchange_rate,
                amount_in_base=(
                    line.amount_in_base
                    if line.amount_in_base is not None
                    else to_base(line.debit_amount, line.credit_amount, line.exchange_rate)
                ),
            )
            for line in draft.lines
            if resolved[line.account] is not None
        ]

        self.db.add(entry)
        await self.db.flush()
        return entry

    def _validate(self, draft: EntryDraft) -> None:
        # A reversal mirrors the posted original, which may hold a single
        # line after lenient resolution
        reversal = draft.reversal_of_id is not None

        if not reversal and len(draft.lines) < 2:
            raise LedgerValidationError(
                "A journal entry needs at least one debit and one credit line",
                details={"line_count": len(draft.lines)},
            )

        for index, line in enumerate(draft.lines):
            if line.debit_amount < 0 or line.credit_amount < 0:
                raise LedgerValidationError("Line amounts cannot be negative", details={"line": index})
            if (line.debit_amount > 0) == (line.credit_amount > 0):
                raise LedgerValidationError(
                    "Each line must carry exactly one of debit or credit", details={"line": index}
                )
            if line.exchange_rate <= 0:
                raise LedgerValidationError("Exchange rate must be positive", details={"line": index})
            if line.currency == self.base_currency and line.exchange_rate != ONE:
                raise LedgerValidationError(
                    f"Lines in {self.base_currency} must use an exchange rate of 1",
                    details={"line": index, "exchange_rate": str(line.exchange_rate)},
                )

        if not reversal and not is_balanced(draft.lines):
            total_debit, total_credit = base_totals(draft.lines)
            raise UnbalancedEntryError(total_debit, total_credit)


async def create_journal_entry(
    db: AsyncSession,
    *,
    actor_id: Optional[int],
    description: str,
    reference_type: ReferenceType,
    reference_id: Optional[str],
    lines: List[JournalLineDraft],
    auto_post: bool = False,
    entry_date: Optional[date] = None,
    notes: Optional[str] = None,
    strict: Optional[bool] = None,
) -> JournalEntry:
    """Write one journal entry; see JournalEntryWriter."""
    draft = EntryDraft(
        description=description,
        reference_type=reference_type,
        reference_id=reference_id,
        lines=lines,
        auto_post=auto_post,
        notes=notes,
    )
    return await JournalEntryWriter(db, actor_id, strict=strict).write(draft, entry_date=entry_date)
