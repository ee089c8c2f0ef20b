"""
Standard chart of accounts for a freight forwarder, and the seeding
helpers that install it together with the journal number counter.
"""

import logging
from typing import Dict, List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from freight_ledger.app.core.config import settings
from freight_ledger.app.models.chart_of_accounts import Account
from freight_ledger.app.models.document_counter import DocumentCounter
from freight_ledger.app.models.ledger_enums import AccountType, NormalBalance

logger = logging.getLogger(__name__)

A, L, E, R, X = (
    AccountType.ASSET,
    AccountType.LIABILITY,
    AccountType.EQUITY,
    AccountType.REVENUE,
    AccountType.EXPENSE,
)
DR, CR = NormalBalance.DEBIT, NormalBalance.CREDIT

# (code, name, type, subtype, normal balance, currency)
STANDARD_CHART: List[Tuple[str, str, AccountType, str, NormalBalance, str]] = [
    ("1000", "Assets", A, "header", DR, "TZS"),
    ("1100", "Cash and Bank", A, "cash", DR, "TZS"),
    ("1110", "Petty Cash", A, "cash", DR, "TZS"),
    ("1120", "Bank Account - TZS", A, "cash", DR, "TZS"),
    ("1130", "Bank Account - USD", A, "cash", DR, "USD"),
    ("1140", "Bank Account - GBP", A, "cash", DR, "GBP"),
    ("1200", "Accounts Receivable", A, "accounts_receivable", DR, "TZS"),
    ("1210", "Trade Receivables", A, "accounts_receivable", DR, "TZS"),
    ("1300", "Prepaid Expenses", A, "prepaid", DR, "TZS"),
    ("2000", "Liabilities", L, "header", CR, "TZS"),
    ("2100", "Accounts Payable", L, "accounts_payable", CR, "TZS"),
    ("2110", "Trade Payables", L, "accounts_payable", CR, "TZS"),
    ("2120", "Agent Payables", L, "accounts_payable", CR, "TZS"),
    ("2200", "Tax Liabilities", L, "tax", CR, "TZS"),
    ("2210", "VAT Payable", L, "tax", CR, "TZS"),
    ("2220", "Withholding Tax Payable", L, "tax", CR, "TZS"),
    ("2300", "Accrued Expenses", L, "accrued", CR, "TZS"),
    ("3000", "Equity", E, "header", CR, "TZS"),
    ("3100", "Share Capital", E, "capital", CR, "TZS"),
    ("3200", "Retained Earnings", E, "retained_earnings", CR, "TZS"),
    ("3300", "Current Year Earnings", E, "current_earnings", CR, "TZS"),
    ("4000", "Revenue", R, "header", CR, "TZS"),
    ("4100", "Shipping Revenue", R, "operating", CR, "TZS"),
    ("4110", "Air Freight Revenue", R, "operating", CR, "TZS"),
    ("4120", "Handling Fee Revenue", R, "operating", CR, "TZS"),
    ("4200", "Other Income", R, "other", CR, "TZS"),
    ("4210", "Foreign Exchange Gain", R, "other", CR, "TZS"),
    ("5000", "Cost of Services", X, "header", DR, "TZS"),
    ("5100", "Agent Costs", X, "cost_of_goods", DR, "TZS"),
    ("5110", "Europe Agent Costs", X, "cost_of_goods", DR, "TZS"),
    ("5120", "Dubai Agent Costs", X, "cost_of_goods", DR, "TZS"),
    ("5130", "China Agent Costs", X, "cost_of_goods", DR, "TZS"),
    ("5140", "India Agent Costs", X, "cost_of_goods", DR, "TZS"),
    ("5150", "USA Agent Costs", X, "cost_of_goods", DR, "TZS"),
    ("5160", "UK Agent Costs", X, "cost_of_goods", DR, "TZS"),
    ("5200", "Freight Costs", X, "cost_of_goods", DR, "TZS"),
    ("5300", "Customs and Duties", X, "cost_of_goods", DR, "TZS"),
    ("6000", "Operating Expenses", X, "header", DR, "TZS"),
    ("6100", "Salaries and Wages", X, "operating", DR, "TZS"),
    ("6110", "Employee Salaries", X, "operating", DR, "TZS"),
    ("6120", "Commissions", X, "operating", DR, "TZS"),
    ("6200", "Rent and Utilities", X, "operating", DR, "TZS"),
    ("6210", "Office Rent", X, "operating", DR, "TZS"),
    ("6220", "Warehouse Rent", X, "operating", DR, "TZS"),
    ("6230", "Utilities", X, "operating", DR, "TZS"),
    ("6300", "Transportation", X, "operating", DR, "TZS"),
    ("6400", "Office Expenses", X, "operating", DR, "TZS"),
    ("6500", "Professional Fees", X, "operating", DR, "TZS"),
    ("6600", "Insurance", X, "operating", DR, "TZS"),
    ("6700", "Depreciation", X, "operating", DR, "TZS"),
    ("6800", "Foreign Exchange Loss", X, "other", DR, "TZS"),
    ("6900", "Other Expenses", X, "other", DR, "TZS"),
]


def parent_code(code: str) -> Optional[str]:
    """1120 -> 1100 -> 1000 -> None."""
    stripped = code.rstrip("0")
    if len(stripped) <= 1:
        return None
    return stripped[:-1].ljust(len(code), "0")


async def seed_standard_chart(db: AsyncSession) -> int:
    """Insert any standard accounts that are missing. Returns how many were added."""
    result = await db.execute(select(Account.account_code, Account.id))
    existing: Dict[str, int] = {code: account_id for code, account_id in result.all()}

    added = 0
    # Ordered so every header exists before its children
    for code, name, account_type, subtype, normal_balance, currency in STANDARD_CHART:
        if code in existing:
            continue
        parent = parent_code(code)
        account = Account(
            account_code=code,
            account_name=name,
            account_type=account_type,
            account_subtype=subtype,
            normal_balance=normal_balance,
            currency=currency,
            parent_id=existing.get(parent) if parent else None,
            is_active=True,
        )
        db.add(account)
        await db.flush()
        existing[code] = account.id
        added += 1

    await db.commit()
    logger.info("Standard chart seeded: %d accounts added", added)
    return added


async def ensure_journal_counter(db: AsyncSession, prefix: str = "JE") -> DocumentCounter:
    """Create the journal number counter if it does not exist yet."""
    key = settings.journal_counter_key
    result = await db.execute(select(DocumentCounter).where(DocumentCounter.counter_key == key))
    counter = result.scalar_one_or_none()
    if counter is None:
        counter = DocumentCounter(
            counter_key=key,
            prefix=prefix,
            counter_value=0,
            description="Journal entry numbers",
        )
        db.add(counter)
        await db.commit()
        logger.info("Journal counter '%s' created with prefix %s", key, prefix)
    return counter
