"""
Event builders: account mapping, rates and descriptions, and recording
the resulting entries.
"""

import pytest
from decimal import Decimal
from sqlalchemy import select, func

from freight_ledger.app.core.exceptions import AccountResolutionError
from freight_ledger.app.domain.ledger import entry_builders
from freight_ledger.app.domain.ledger.account_resolver import ByCode, ById
from freight_ledger.app.domain.ledger.currency import base_totals
from freight_ledger.app.domain.ledger.entry_builders import record_event
from freight_ledger.app.models.chart_of_accounts import Account
from freight_ledger.app.models.journal_entry import JournalEntry
from freight_ledger.app.models.ledger_enums import JournalStatus, ReferenceType


def _accounts(draft):
    debit = next(line for line in draft.lines if line.debit_amount > 0)
    credit = next(line for line in draft.lines if line.credit_amount > 0)
    return debit.account, credit.account


# Pure builders

def test_invoice_issued_maps_to_receivable_and_revenue():
    draft = entry_builders.invoice_issued(
        invoice_id="inv-1", invoice_number="INV-1", amount="100", currency="USD",
        exchange_rate="2500", customer_name="ACME",
    )

    assert draft.description == "Invoice INV-1 issued to ACME"
    assert draft.reference_type == ReferenceType.INVOICE
    assert draft.reference_id == "inv-1"
    assert draft.auto_post is True
    assert len(draft.lines) == 2
    assert _accounts(draft) == (ByCode("1210"), ByCode("4110"))
    assert [line.description for line in draft.lines] == ["AR - Invoice INV-1", "Revenue - Invoice INV-1"]
    assert base_totals(draft.lines) == (Decimal("250000.00"), Decimal("250000.00"))


def test_invoice_in_base_currency_ignores_supplied_rate():
    draft = entry_builders.invoice_issued(
        invoice_id=5, invoice_number="INV-5", amount="1000", currency="TZS", exchange_rate="2500",
    )
    assert draft.description == "Invoice INV-5 issued"
    assert draft.reference_id == "5"
    assert all(line.exchange_rate == Decimal("1") for line in draft.lines)


@pytest.mark.parametrize("currency, code", [("TZS", "1120"), ("USD", "1130"), ("GBP", "1140"), ("EUR", "1120")])
def test_payment_debits_bank_account_for_currency(currency, code):
    draft = entry_builders.invoice_payment_received(
        invoice_id="inv-1", invoice_number="INV-1", amount="100", currency=currency, exchange_rate="2500",
    )
    assert _accounts(draft) == (ByCode(code), ByCode("1210"))
    assert draft.reference_type == ReferenceType.PAYMENT


def test_payment_prefers_deposit_account_and_payment_currency():
    draft = entry_builders.invoice_payment_received(
        invoice_id="inv-1", invoice_number="INV-1", amount="100", currency="USD",
        exchange_rate="1", payment_currency="TZS", deposit_account_id=77,
    )
    assert _accounts(draft) == (ById(77), ByCode("1210"))
    assert all(line.currency == "TZS" for line in draft.lines)
    assert all(line.exchange_rate == Decimal("1") for line in draft.lines)


def test_expense_approved_credits_accounts_payable():
    draft = entry_builders.expense_approved(
        expense_id="exp-9", category="customs", amount="50", currency="USD", exchange_rate="2500",
    )
    assert _accounts(draft) == (ByCode("5300"), ByCode("2110"))
    assert draft.description == "Expense approved: customs"
    assert [line.debit_amount for line in draft.lines] == [Decimal("50.00"), Decimal("0.00")]
    assert [line.credit_amount for line in draft.lines] == [Decimal("0.00"), Decimal("50.00")]


def test_expense_unknown_category_falls_back_to_other():
    draft = entry_builders.expense_approved(
        expense_id="exp-1", category="entertainment", amount="10", currency="TZS",
    )
    assert _accounts(draft)[0] == ByCode("6900")


def test_expense_paid_credits_selected_bank_account():
    draft = entry_builders.expense_paid(
        expense_id="exp-2", category="fuel", amount="80000", currency="TZS",
        bank_account_id=12, description="Diesel for truck",
    )
    assert _accounts(draft) == (ByCode("5200"), ById(12))
    assert draft.description == "Expense paid: Diesel for truck"


@pytest.mark.parametrize("region, code", [("china", "5130"), ("UK", "5160"), ("mars", "5100"), (None, "5100")])
def test_agent_invoice_debits_regional_cost(region, code):
    draft = entry_builders.agent_invoice_received(
        invoice_id="ai-1", invoice_number="AG-1", amount="300", currency="USD",
        exchange_rate="2500", origin_region=region,
    )
    assert _accounts(draft) == (ByCode(code), ByCode("2120"))


def test_agent_payment_derives_rate_from_settled_amount():
    draft = entry_builders.agent_payment_made(
        invoice_id="ai-1", invoice_number="AG-1", amount="300", currency="USD",
        exchange_rate="2500", amount_in_base="765000",
    )
    assert _accounts(draft) == (ByCode("2120"), ByCode("1130"))
    assert all(line.exchange_rate == Decimal("2550.000000") for line in draft.lines)
    assert base_totals(draft.lines) == (Decimal("765000.00"), Decimal("765000.00"))


def test_agent_payment_keeps_settled_amount_when_rate_rounds():
    # 2543210123.45 / 1000000 does not fit in six rate places
    draft = entry_builders.agent_payment_made(
        invoice_id="ai-9", invoice_number="AG-9", amount="1000000", currency="USD",
        amount_in_base="2543210123.45",
    )
    assert all(line.exchange_rate == Decimal("2543.210123") for line in draft.lines)
    assert all(line.amount_in_base == Decimal("2543210123.45") for line in draft.lines)
    assert base_totals(draft.lines) == (Decimal("2543210123.45"), Decimal("2543210123.45"))


def test_agent_payment_in_base_currency_ignores_settled_amount():
    draft = entry_builders.agent_payment_made(
        invoice_id="ai-9", invoice_number="AG-9", amount="500", currency="TZS",
        amount_in_base="765000",
    )
    assert all(line.exchange_rate == Decimal("1") for line in draft.lines)
    assert all(line.amount_in_base is None for line in draft.lines)


def test_agent_payment_from_source_account():
    draft = entry_builders.agent_payment_made(
        invoice_id="ai-1", invoice_number="AG-1", amount="300", currency="USD",
        exchange_rate="2500", source_account_id=31,
    )
    assert _accounts(draft) == (ByCode("2120"), ById(31))
    assert draft.description == "Payment to agent for Invoice AG-1"


def test_agent_billing_books_clearing_revenue():
    draft = entry_builders.agent_billing(
        invoice_id="ab-1", invoice_number="AB-1", amount="120", currency="TZS", agent_name="Kibo Clearing",
    )
    assert _accounts(draft) == (ByCode("1210"), ByCode("4110"))
    assert draft.description == "Agent invoice AB-1 to Kibo Clearing (clearing services)"


# Recording

async def test_usd_invoice_recorded_at_base_amount(db_session, chart, accountant_user):
    draft = entry_builders.invoice_issued(
        invoice_id="inv-100", invoice_number="INV-100", amount="100.00", currency="USD", exchange_rate="2500",
    )
    entry = await record_event(db_session, draft, actor_id=accountant_user.id)

    assert entry.status == JournalStatus.POSTED
    assert entry.posted_by == accountant_user.id
    debit, credit = entry.lines
    assert debit.account_id == chart["1210"]
    assert debit.debit_amount == Decimal("100.00")
    assert debit.amount_in_base == Decimal("250000.00")
    assert credit.account_id == chart["4110"]
    assert credit.credit_amount == Decimal("100.00")
    assert credit.amount_in_base == Decimal("250000.00")


async def test_agent_payment_stores_settled_base_amount(db_session, chart, accountant_user):
    draft = entry_builders.agent_payment_made(
        invoice_id="ai-9", invoice_number="AG-9", amount="1000000", currency="USD",
        amount_in_base="2543210123.45",
    )
    entry = await record_event(db_session, draft, actor_id=accountant_user.id)

    assert [line.amount_in_base for line in entry.lines] == [
        Decimal("2543210123.45"), Decimal("2543210123.45"),
    ]
    assert all(line.exchange_rate == Decimal("2543.210123") for line in entry.lines)


async def test_customs_expense_recorded(db_session, chart, accountant_user):
    draft = entry_builders.expense_approved(
        expense_id="exp-50", category="customs", amount="50", currency="USD", exchange_rate="2500",
    )
    entry = await record_event(db_session, draft, actor_id=accountant_user.id)

    debit, credit = entry.lines
    assert (debit.account_id, debit.debit_amount) == (chart["5300"], Decimal("50.00"))
    assert (credit.account_id, credit.credit_amount) == (chart["2110"], Decimal("50.00"))


async def test_same_event_recorded_twice_creates_two_entries(db_session, chart, accountant_user):
    for _ in range(2):
        draft = entry_builders.invoice_issued(
            invoice_id="inv-dup", invoice_number="INV-DUP", amount="10", currency="TZS",
        )
        await record_event(db_session, draft, actor_id=accountant_user.id)

    count = (await db_session.execute(
        select(func.count(JournalEntry.id)).where(JournalEntry.reference_id == "inv-dup")
    )).scalar()
    assert count == 2


async def test_missing_chart_account_strict_and_lenient(db_session, chart, accountant_user):
    # An agent region code that the chart does not carry
    china = await db_session.get(Account, chart["5130"])
    await db_session.delete(china)
    await db_session.commit()

    draft = entry_builders.agent_invoice_received(
        invoice_id="ai-2", invoice_number="AG-2", amount="10", currency="TZS", origin_region="china",
    )
    with pytest.raises(AccountResolutionError):
        await record_event(db_session, draft, actor_id=accountant_user.id, strict=True)

    entry = await record_event(db_session, draft, actor_id=accountant_user.id, strict=False)
    assert len(entry.lines) == 1
    assert entry.lines[0].account_id == chart["2120"]
