"""
Journal entry writer: validation, resolution policy, numbering, atomicity.
"""

import pytest
from datetime import date, datetime, timezone
from decimal import Decimal
from sqlalchemy import select, func

from freight_ledger.app.core.exceptions import (
    AccountResolutionError,
    JournalNumberError,
    LedgerValidationError,
    UnbalancedEntryError,
)
from freight_ledger.app.domain.ledger.account_resolver import ByCode, ById
from freight_ledger.app.domain.ledger.journal_writer import (
    JournalLineDraft,
    create_journal_entry,
    generate_journal_number,
)
from freight_ledger.app.models.document_counter import DocumentCounter
from freight_ledger.app.models.journal_entry import JournalEntry, JournalLine
from freight_ledger.app.models.ledger_enums import JournalStatus, ReferenceType


def _lines(debit_ref, credit_ref, amount="100.00", currency="TZS", rate="1"):
    return [
        JournalLineDraft(account=debit_ref, description="debit", debit_amount=Decimal(amount),
                         currency=currency, exchange_rate=Decimal(rate)),
        JournalLineDraft(account=credit_ref, description="credit", credit_amount=Decimal(amount),
                         currency=currency, exchange_rate=Decimal(rate)),
    ]


async def _write(db, actor_id, lines, **kwargs):
    kwargs.setdefault("description", "Test entry")
    kwargs.setdefault("reference_type", ReferenceType.ADJUSTMENT)
    kwargs.setdefault("reference_id", "T-1")
    return await create_journal_entry(db, actor_id=actor_id, lines=lines, **kwargs)


async def _count(db, model):
    return (await db.execute(select(func.count(model.id)))).scalar()


async def _counter_value(db):
    return (await db.execute(select(DocumentCounter.counter_value))).scalar()


async def test_writes_header_and_lines(db_session, chart, accountant_user):
    entry = await _write(
        db_session, accountant_user.id,
        _lines(ByCode("1120"), ByCode("4110"), amount="1500.50"),
    )

    assert entry.id is not None
    assert entry.status == JournalStatus.DRAFT
    assert entry.created_by == accountant_user.id
    assert entry.posted_at is None
    assert entry.entry_date == datetime.now(timezone.utc).date()
    assert [line.account_id for line in entry.lines] == [chart["1120"], chart["4110"]]
    assert entry.lines[0].debit_amount == Decimal("1500.50")
    assert entry.lines[1].credit_amount == Decimal("1500.50")
    assert all(line.amount_in_base == Decimal("1500.50") for line in entry.lines)


async def test_auto_post_stamps_posting(db_session, chart, accountant_user):
    entry = await _write(
        db_session, accountant_user.id,
        _lines(ByCode("1120"), ByCode("4110")),
        auto_post=True,
        entry_date=date(2026, 3, 31),
    )

    assert entry.status == JournalStatus.POSTED
    assert entry.posted_by == accountant_user.id
    assert entry.posted_at is not None
    assert entry.entry_date == date(2026, 3, 31)


async def test_foreign_currency_lines_carry_base_amounts(db_session, chart, accountant_user):
    entry = await _write(
        db_session, accountant_user.id,
        _lines(ByCode("1210"), ByCode("4110"), amount="100.00", currency="USD", rate="2500"),
    )

    for line in entry.lines:
        assert line.currency == "USD"
        assert line.exchange_rate == Decimal("2500")
        assert line.amount_in_base == Decimal("250000.00")


async def test_entry_numbers_are_sequential(db_session, chart, accountant_user):
    year = datetime.now(timezone.utc).year
    first = await _write(db_session, accountant_user.id, _lines(ByCode("1120"), ByCode("4110")))
    second = await _write(db_session, accountant_user.id, _lines(ByCode("1120"), ByCode("4110")))

    assert first.entry_number == f"JE-{year}-0001"
    assert second.entry_number == f"JE-{year}-0002"


async def test_generate_journal_number_uses_given_date(db_session, chart):
    number = await generate_journal_number(db_session, today=date(2031, 1, 5))
    assert number == "JE-2031-0001"


async def test_missing_counter_raises(db_session, chart, accountant_user):
    with pytest.raises(JournalNumberError) as exc_info:
        await generate_journal_number(db_session, counter_key="does-not-exist")
    assert exc_info.value.details == {"counter_key": "does-not-exist"}


async def test_strict_mode_rejects_unknown_account_before_writing(db_session, chart, accountant_user):
    with pytest.raises(AccountResolutionError) as exc_info:
        await _write(
            db_session, accountant_user.id,
            _lines(ByCode("1120"), ByCode("9999")),
            strict=True,
        )

    assert exc_info.value.details["unresolved"] == ["code 9999"]
    assert await _count(db_session, JournalEntry) == 0
    assert await _counter_value(db_session) == 0


async def test_lenient_mode_drops_unresolved_line(db_session, chart, accountant_user):
    entry = await _write(
        db_session, accountant_user.id,
        _lines(ByCode("1120"), ByCode("9999")),
        strict=False,
    )

    assert len(entry.lines) == 1
    assert entry.lines[0].account_id == chart["1120"]
    assert await _count(db_session, JournalLine) == 1


async def test_strict_mode_rejects_unknown_account_id(db_session, chart, accountant_user):
    with pytest.raises(AccountResolutionError) as exc_info:
        await _write(
            db_session, accountant_user.id,
            _lines(ByCode("1120"), ById(999999)),
            strict=True,
        )

    assert exc_info.value.details["unresolved"] == ["id 999999"]
    assert await _count(db_session, JournalEntry) == 0
    assert await _count(db_session, JournalLine) == 0
    assert await _counter_value(db_session) == 0


async def test_lenient_mode_drops_unknown_account_id(db_session, chart, accountant_user):
    entry = await _write(
        db_session, accountant_user.id,
        _lines(ById(chart["1120"]), ById(999999)),
        strict=False,
    )

    assert [line.account_id for line in entry.lines] == [chart["1120"]]
    assert await _count(db_session, JournalLine) == 1


async def test_unbalanced_entry_rejected(db_session, chart, accountant_user):
    lines = [
        JournalLineDraft(account=ByCode("1120"), description="dr", debit_amount=Decimal("100")),
        JournalLineDraft(account=ByCode("4110"), description="cr", credit_amount=Decimal("90")),
    ]
    with pytest.raises(UnbalancedEntryError) as exc_info:
        await _write(db_session, accountant_user.id, lines)

    assert exc_info.value.details == {"total_debit": "100.00", "total_credit": "90.00"}
    assert await _count(db_session, JournalEntry) == 0


async def test_mixed_currency_entry_balances_in_base(db_session, chart, accountant_user):
    lines = [
        JournalLineDraft(account=ByCode("1130"), description="USD in", debit_amount=Decimal("100"),
                         currency="USD", exchange_rate=Decimal("2500")),
        JournalLineDraft(account=ByCode("1120"), description="TZS out", credit_amount=Decimal("250000")),
    ]
    entry = await _write(db_session, accountant_user.id, lines)
    assert [line.amount_in_base for line in entry.lines] == [Decimal("250000.00"), Decimal("250000.00")]


async def test_rate_rounded_to_six_places_before_conversion(db_session, chart, accountant_user):
    entry = await _write(
        db_session, accountant_user.id,
        _lines(ByCode("1130"), ByCode("4110"), amount="100000", currency="USD", rate="2500.1234567"),
    )

    for line in entry.lines:
        assert line.exchange_rate == Decimal("2500.123457")
        assert line.amount_in_base == Decimal("250012345.70")


def test_draft_rounds_rate_half_up():
    line = JournalLineDraft(account=ByCode("1130"), description="dr", debit_amount=Decimal("1"),
                            currency="USD", exchange_rate="0.0000005")
    assert line.exchange_rate == Decimal("0.000001")


@pytest.mark.parametrize("lines", [
    # Single line
    [JournalLineDraft(account=ByCode("1120"), description="only", debit_amount=Decimal("10"))],
    # Both sides on one line
    [
        JournalLineDraft(account=ByCode("1120"), description="both", debit_amount=Decimal("10"),
                         credit_amount=Decimal("10")),
        JournalLineDraft(account=ByCode("4110"), description="cr", credit_amount=Decimal("0")),
    ],
    # Negative amount
    [
        JournalLineDraft(account=ByCode("1120"), description="dr", debit_amount=Decimal("-10")),
        JournalLineDraft(account=ByCode("4110"), description="cr", credit_amount=Decimal("-10")),
    ],
    # Non-positive rate
    [
        JournalLineDraft(account=ByCode("1130"), description="dr", debit_amount=Decimal("10"),
                         currency="USD", exchange_rate=Decimal("0")),
        JournalLineDraft(account=ByCode("4110"), description="cr", credit_amount=Decimal("10"),
                         currency="USD", exchange_rate=Decimal("0")),
    ],
    # Base currency at a rate other than 1
    [
        JournalLineDraft(account=ByCode("1120"), description="dr", debit_amount=Decimal("10"),
                         currency="TZS", exchange_rate=Decimal("2")),
        JournalLineDraft(account=ByCode("4110"), description="cr", credit_amount=Decimal("10"),
                         currency="TZS", exchange_rate=Decimal("2")),
    ],
])
async def test_malformed_lines_rejected(db_session, chart, accountant_user, lines):
    with pytest.raises(LedgerValidationError):
        await _write(db_session, accountant_user.id, lines)

    assert await _count(db_session, JournalEntry) == 0


def test_line_draft_defaults_to_base_currency():
    line = JournalLineDraft(account=ByCode("1120"), description="x", debit_amount="12.345")
    assert line.currency == "TZS"
    assert line.exchange_rate == Decimal("1")
    assert line.debit_amount == Decimal("12.35")
    assert line.credit_amount == Decimal("0.00")
