"""
Currency Normalizer.

Every journal line carries its transaction currency and the rate that
converts it into the base currency (TZS). The writer only multiplies;
choosing the rate is the caller's job.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional, Tuple

from freight_ledger.app.core.config import settings

TWOPLACES = Decimal("0.01")
RATE_PLACES = Decimal("0.000001")
BALANCE_TOLERANCE = Decimal("0.01")
ONE = Decimal("1")


def to_decimal(value) -> Decimal:
    if value is None or value == "":
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def money(value) -> Decimal:
    return to_decimal(value).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def effective_rate(currency: str, exchange_rate, base_currency: Optional[str] = None) -> Decimal:
    """The base currency always converts at 1; anything else at the supplied rate."""
    base = (base_currency or settings.base_currency).upper()
    if (currency or "").upper() == base:
        return ONE
    return to_decimal(exchange_rate)


def rate_from_base_amount(amount, amount_in_base) -> Decimal:
    """Rate implied by a settlement already known in base currency."""
    return (to_decimal(amount_in_base) / to_decimal(amount)).quantize(RATE_PLACES, rounding=ROUND_HALF_UP)


def to_base(debit_amount, credit_amount, exchange_rate) -> Decimal:
    amount = to_decimal(debit_amount) or to_decimal(credit_amount)
    return money(amount * to_decimal(exchange_rate))


def line_base_amounts(line) -> Tuple[Decimal, Decimal]:
    """
    Base-currency (debit, credit) of one line.

    A line that already carries amount_in_base keeps it on whichever side
    holds the amount; otherwise the amount is converted at the line rate.
    """
    debit = to_decimal(line.debit_amount)
    credit = to_decimal(line.credit_amount)
    override = getattr(line, "amount_in_base", None)
    if override is not None:
        override = money(override)
        return (override, Decimal("0")) if debit else (Decimal("0"), override)
    rate = to_decimal(line.exchange_rate)
    return money(debit * rate), money(credit * rate)


def base_totals(lines: Iterable) -> Tuple[Decimal, Decimal]:
    """
    Sum base-currency debits and credits.

    Works on anything with debit_amount, credit_amount and exchange_rate
    attributes (drafts or persisted lines).
    """
    total_debit = Decimal("0")
    total_credit = Decimal("0")
    for line in lines:
        debit, credit = line_base_amounts(line)
        total_debit += debit
        total_credit += credit
    return total_debit, total_credit


def is_balanced(lines: Iterable) -> bool:
    total_debit, total_credit = base_totals(lines)
    return abs(total_debit - total_credit) < BALANCE_TOLERANCE
