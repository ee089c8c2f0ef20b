"""
Account code mappings for automatic journal entries.

Static lookup tables; an unmapped expense category or agent region
falls back to the generic code of its group without raising.
"""

from typing import Optional


class AccountCodes:
    """Chart of accounts codes the entry builders post to."""

    # Assets
    CASH_TZS = "1120"
    CASH_USD = "1130"
    CASH_GBP = "1140"
    ACCOUNTS_RECEIVABLE = "1210"

    # Liabilities
    ACCOUNTS_PAYABLE = "2110"
    AGENT_PAYABLES = "2120"

    # Revenue
    SHIPPING_REVENUE = "4110"
    HANDLING_FEE_REVENUE = "4120"

    # Expenses
    AGENT_COSTS = "5100"
    OTHER_EXPENSES = "6900"


EXPENSE_CATEGORY_ACCOUNTS = {
    "shipping": "5200",
    "handling": "5200",
    "customs": "5300",
    "insurance": "6600",
    "packaging": "6400",
    "storage": "6200",
    "fuel": "5200",
    "other": AccountCodes.OTHER_EXPENSES,
}

AGENT_REGION_ACCOUNTS = {
    "europe": "5110",
    "dubai": "5120",
    "china": "5130",
    "india": "5140",
    "usa": "5150",
    "uk": "5160",
}

CASH_ACCOUNTS_BY_CURRENCY = {
    "TZS": AccountCodes.CASH_TZS,
    "USD": AccountCodes.CASH_USD,
    "GBP": AccountCodes.CASH_GBP,
}


def expense_account_for(category: Optional[str]) -> str:
    return EXPENSE_CATEGORY_ACCOUNTS.get(category or "", EXPENSE_CATEGORY_ACCOUNTS["other"])


def agent_cost_account_for(region: Optional[str]) -> str:
    if not region:
        return AccountCodes.AGENT_COSTS
    return AGENT_REGION_ACCOUNTS.get(region.lower(), AccountCodes.AGENT_COSTS)


def cash_account_for(currency: Optional[str]) -> str:
    """Bank account matching the settlement currency; TZS for anything else."""
    return CASH_ACCOUNTS_BY_CURRENCY.get((currency or "").upper(), AccountCodes.CASH_TZS)
