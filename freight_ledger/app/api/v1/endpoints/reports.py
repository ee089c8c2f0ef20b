"""
Ledger Report API Endpoints.
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from freight_ledger.app.db.session import get_db
from freight_ledger.app.core.guards import require_role, LEDGER_READERS
from freight_ledger.app.domain.ledger.reports import account_balance, trial_balance
from freight_ledger.app.schemas.ledger import AccountBalanceResponse, TrialBalanceResponse

router = APIRouter(prefix="/reports", tags=["Ledger - Reports"])


@router.get("/trial-balance", response_model=TrialBalanceResponse)
async def get_trial_balance(
    as_of: Optional[date] = None,
    current_user: dict = Depends(require_role(LEDGER_READERS)),
    db: AsyncSession = Depends(get_db)
):
    """
    Trial balance in base currency over posted entries up to as_of.
    """
    report = await trial_balance(db, as_of=as_of)
    return TrialBalanceResponse.model_validate(report)


@router.get("/accounts/{account_id}/balance", response_model=AccountBalanceResponse)
async def get_account_balance(
    account_id: int,
    as_of: Optional[date] = None,
    current_user: dict = Depends(require_role(LEDGER_READERS)),
    db: AsyncSession = Depends(get_db)
):
    report = await account_balance(db, account_id, as_of=as_of)
    return AccountBalanceResponse.model_validate(report)
