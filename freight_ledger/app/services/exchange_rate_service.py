"""
Exchange Rate Service.

Maintains the per-currency rate to the base currency and answers rate
lookups for callers that did not supply one. Lookups go through the
Redis cache; updates invalidate it.
"""

import logging
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from freight_ledger.app.core.config import settings
from freight_ledger.app.core.exceptions import LedgerValidationError, ResourceNotFoundError
from freight_ledger.app.domain.ledger.currency import ONE, to_decimal
from freight_ledger.app.models.exchange_rate import ExchangeRate
from freight_ledger.app.services.cache import CacheService

logger = logging.getLogger(__name__)


def _cache_key(currency_code: str) -> str:
    return f"exchange_rate:{currency_code}"


class ExchangeRateService:

    @staticmethod
    async def list_rates(db: AsyncSession) -> List[ExchangeRate]:
        result = await db.execute(select(ExchangeRate).order_by(ExchangeRate.currency_code))
        return result.scalars().all()

    @staticmethod
    async def get_rate(db: AsyncSession, currency_code: str) -> Decimal:
        """
        Units of base currency per unit of currency_code.

        Raises:
            ResourceNotFoundError: no rate is configured for the currency
        """
        code = currency_code.upper()
        if code == settings.base_currency.upper():
            return ONE

        cached = await CacheService.get(_cache_key(code))
        if cached is not None:
            return Decimal(cached)

        result = await db.execute(select(ExchangeRate).where(ExchangeRate.currency_code == code))
        rate = result.scalar_one_or_none()
        if rate is None:
            raise ResourceNotFoundError("Exchange rate", code)

        await CacheService.set(_cache_key(code), str(rate.rate_to_base), ttl_seconds=settings.exchange_rate_cache_ttl)
        return to_decimal(rate.rate_to_base)

    @staticmethod
    async def resolve_rate(db: AsyncSession, currency_code: str, exchange_rate=None) -> Decimal:
        """The caller's rate when given, otherwise the configured one."""
        if exchange_rate is not None:
            return to_decimal(exchange_rate)
        return await ExchangeRateService.get_rate(db, currency_code)

    @staticmethod
    async def upsert_rate(
        db: AsyncSession,
        currency_code: str,
        rate_to_base,
        currency_name: Optional[str] = None,
        updated_by: Optional[int] = None,
    ) -> ExchangeRate:
        code = currency_code.upper()
        rate_value = to_decimal(rate_to_base)

        if code == settings.base_currency.upper():
            raise LedgerValidationError(
                f"{code} is the base currency; its rate is always 1",
                details={"currency_code": code},
            )
        if rate_value <= 0:
            raise LedgerValidationError("Exchange rate must be positive", details={"currency_code": code})

        result = await db.execute(select(ExchangeRate).where(ExchangeRate.currency_code == code))
        rate = result.scalar_one_or_none()
        if rate is None:
            rate = ExchangeRate(
                currency_code=code,
                currency_name=currency_name or code,
                rate_to_base=rate_value,
                updated_by=updated_by,
            )
            db.add(rate)
        else:
            rate.rate_to_base = rate_value
            rate.updated_by = updated_by
            if currency_name:
                rate.currency_name = currency_name

        await db.commit()
        await db.refresh(rate)
        await CacheService.delete(_cache_key(code))

        logger.info("Exchange rate %s set to %s", code, rate_value)
        return rate
