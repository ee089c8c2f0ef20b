"""
Category, region and currency account mappings.
"""

import pytest

from freight_ledger.app.domain.ledger.account_codes import (
    AccountCodes,
    agent_cost_account_for,
    cash_account_for,
    expense_account_for,
)


@pytest.mark.parametrize("category, code", [
    ("shipping", "5200"),
    ("handling", "5200"),
    ("fuel", "5200"),
    ("customs", "5300"),
    ("insurance", "6600"),
    ("packaging", "6400"),
    ("storage", "6200"),
    ("other", "6900"),
    ("marketing", "6900"),
])
def test_expense_category_accounts(category, code):
    assert expense_account_for(category) == code


@pytest.mark.parametrize("region, code", [
    ("europe", "5110"),
    ("Dubai", "5120"),
    ("CHINA", "5130"),
    ("india", "5140"),
    ("usa", "5150"),
    ("uk", "5160"),
    ("japan", "5100"),
    (None, "5100"),
])
def test_agent_region_accounts(region, code):
    assert agent_cost_account_for(region) == code


def test_cash_account_by_currency():
    assert cash_account_for("TZS") == AccountCodes.CASH_TZS
    assert cash_account_for("usd") == AccountCodes.CASH_USD
    assert cash_account_for("GBP") == AccountCodes.CASH_GBP
    assert cash_account_for("EUR") == AccountCodes.CASH_TZS
