"""
Chart of Accounts API Endpoints.

Everyone on staff can read the chart; only admins add accounts.
"""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import List, Optional

from freight_ledger.app.db.session import get_db
from freight_ledger.app.core.guards import require_admin, require_role, LEDGER_READERS
from freight_ledger.app.models.chart_of_accounts import Account
from freight_ledger.app.models.ledger_enums import AccountType
from freight_ledger.app.schemas.ledger import AccountCreate, AccountResponse
from freight_ledger.app.services.audit import log_user_action, AuditAction

router = APIRouter(prefix="/chart-of-accounts", tags=["Ledger - Chart of Accounts"])


@router.get("", response_model=List[AccountResponse])
async def list_accounts(
    account_type: Optional[AccountType] = None,
    include_inactive: bool = Query(default=False),
    current_user: dict = Depends(require_role(LEDGER_READERS)),
    db: AsyncSession = Depends(get_db)
):
    query = select(Account).order_by(Account.account_code)
    if account_type:
        query = query.where(Account.account_type == account_type)
    if not include_inactive:
        query = query.where(Account.is_active == True)  # noqa: E712

    result = await db.execute(query)
    return result.scalars().all()


@router.post("", response_model=AccountResponse, status_code=status.HTTP_201_CREATED)
async def create_account(
    account_data: AccountCreate,
    current_user: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """
    Add an account to the chart (Admin only).

    Account codes are unique.
    """
    existing = await db.execute(
        select(Account).where(Account.account_code == account_data.account_code)
    )
    if existing.scalar_one_or_none():
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Account code {account_data.account_code} already exists"
        )

    if account_data.parent_id is not None and await db.get(Account, account_data.parent_id) is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Parent account not found"
        )

    account = Account(
        account_code=account_data.account_code,
        account_name=account_data.account_name,
        account_type=account_data.account_type,
        account_subtype=account_data.account_subtype,
        normal_balance=account_data.normal_balance,
        parent_id=account_data.parent_id,
        description=account_data.description,
        currency=account_data.currency,
        is_active=True,
    )
    db.add(account)
    await db.commit()
    await db.refresh(account)
    response = AccountResponse.model_validate(account)

    await log_user_action(
        db=db,
        current_user=current_user,
        action=AuditAction.ACCOUNT_CREATED,
        target_type="account",
        target_id=account.id,
        metadata={"account_code": account.account_code, "account_name": account.account_name},
    )
    return response
