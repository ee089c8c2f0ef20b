"""
Exchange Rate API Endpoints.

Rates convert foreign-currency amounts into the base currency when an
event arrives without an explicit rate.
"""

from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from freight_ledger.app.db.session import get_db
from freight_ledger.app.core.guards import require_admin, require_role, LEDGER_READERS
from freight_ledger.app.schemas.exchange_rate import ExchangeRateResponse, ExchangeRateUpdate
from freight_ledger.app.services.audit import log_user_action, AuditAction
from freight_ledger.app.services.exchange_rate_service import ExchangeRateService

router = APIRouter(prefix="/exchange-rates", tags=["Ledger - Exchange Rates"])


@router.get("", response_model=List[ExchangeRateResponse])
async def list_exchange_rates(
    current_user: dict = Depends(require_role(LEDGER_READERS)),
    db: AsyncSession = Depends(get_db)
):
    return await ExchangeRateService.list_rates(db)


@router.put("/{currency_code}", response_model=ExchangeRateResponse)
async def update_exchange_rate(
    payload: ExchangeRateUpdate,
    currency_code: str = Path(..., min_length=3, max_length=3),
    current_user: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """
    Create or update the rate for a currency (Admin only).
    """
    rate = await ExchangeRateService.upsert_rate(
        db,
        currency_code,
        payload.rate_to_base,
        currency_name=payload.currency_name,
        updated_by=current_user["user_id"],
    )
    response = ExchangeRateResponse.model_validate(rate)

    await log_user_action(
        db=db,
        current_user=current_user,
        action=AuditAction.EXCHANGE_RATE_UPDATED,
        target_type="exchange_rate",
        target_id=rate.currency_code,
        metadata={"rate_to_base": str(rate.rate_to_base)},
    )
    return response
