"""
Account Resolver.

Maps a symbolic account reference to a persisted chart-of-accounts id.
A reference is either a stable account code (ByCode) or an id the
caller already knows (ById, e.g. a user-selected bank account).
"""

from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Set, Union

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from freight_ledger.app.models.chart_of_accounts import Account


@dataclass(frozen=True)
class ByCode:
    code: str

    @property
    def label(self) -> str:
        return f"code {self.code}"


@dataclass(frozen=True)
class ById:
    account_id: int

    @property
    def label(self) -> str:
        return f"id {self.account_id}"


AccountRef = Union[ByCode, ById]


async def resolve_accounts(
    db: AsyncSession, refs: Iterable[AccountRef]
) -> Dict[AccountRef, Optional[int]]:
    """
    Resolve many references at once.

    One query per reference kind. Unknown codes and ids that are not in
    the chart both map to None.
    """
    refs = list(refs)
    codes = {ref.code for ref in refs if isinstance(ref, ByCode)}
    ids = {ref.account_id for ref in refs if isinstance(ref, ById)}

    ids_by_code: Dict[str, int] = {}
    if codes:
        result = await db.execute(
            select(Account.account_code, Account.id).where(Account.account_code.in_(codes))
        )
        ids_by_code = {code: account_id for code, account_id in result.all()}

    known_ids: Set[int] = set()
    if ids:
        result = await db.execute(select(Account.id).where(Account.id.in_(ids)))
        known_ids = set(result.scalars().all())

    resolved: Dict[AccountRef, Optional[int]] = {}
    for ref in refs:
        if isinstance(ref, ById):
            resolved[ref] = ref.account_id if ref.account_id in known_ids else None
        elif isinstance(ref, ByCode):
            resolved[ref] = ids_by_code.get(ref.code)
        else:
            raise TypeError(f"Unsupported account reference: {ref!r}")
    return resolved


async def resolve_account(db: AsyncSession, ref: AccountRef) -> Optional[int]:
    """Resolve a single reference; None when it is not in the chart."""
    resolved = await resolve_accounts(db, [ref])
    return resolved[ref]
