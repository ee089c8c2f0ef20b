"""
Database seeding script for the ledger.

Creates the tables, the standard chart of accounts, the journal number
counter, starting exchange rates and one user per role.
Safe to run repeatedly: existing rows are left alone.
"""

import asyncio
import sys
from decimal import Decimal
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy import select

from freight_ledger.app.core.config import settings
from freight_ledger.app.core.jwt import create_user_token
from freight_ledger.app.db.session import AsyncSessionLocal, engine, Base
from freight_ledger.app.domain.ledger.standard_chart import ensure_journal_counter, seed_standard_chart
from freight_ledger.app.models.user import User
from freight_ledger.app.models.enums import UserRole
from freight_ledger.app.models.exchange_rate import ExchangeRate
import freight_ledger.app.main  # noqa: F401  registers every model with Base

SEED_USERS = [
    ("admin@freight-ledger.local", "admin", UserRole.ADMIN),
    ("accountant@freight-ledger.local", "accountant", UserRole.ACCOUNTANT),
    ("employee@freight-ledger.local", "employee", UserRole.EMPLOYEE),
]

SEED_RATES = [
    ("USD", "US Dollar", Decimal("2500")),
    ("GBP", "British Pound", Decimal("3150")),
]


async def seed_users(db) -> None:
    for email, username, role in SEED_USERS:
        result = await db.execute(select(User).where(User.username == username))
        if result.scalar_one_or_none():
            print(f"ℹ️  {role.value} user '{username}' already exists, skipping")
            continue
        db.add(User(email=email, username=username, role=role, is_active=True))
        print(f"✅ Created {role.value} user ({username})")
    await db.commit()

    if settings.debug:
        # Local runs have no identity provider; mint tokens with the shared secret
        result = await db.execute(select(User).where(User.username.in_([u[1] for u in SEED_USERS])))
        for user in result.scalars().all():
            print(f"🔑 {user.username}: {create_user_token(user)}")


async def seed_exchange_rates(db) -> None:
    for code, name, rate in SEED_RATES:
        result = await db.execute(select(ExchangeRate).where(ExchangeRate.currency_code == code))
        if result.scalar_one_or_none():
            print(f"ℹ️  Exchange rate {code} already set, skipping")
            continue
        db.add(ExchangeRate(currency_code=code, currency_name=name, rate_to_base=rate))
        print(f"✅ Exchange rate {code} = {rate}")
    await db.commit()


async def seed():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with AsyncSessionLocal() as db:
        print("🌱 Starting ledger seeding...")

        added = await seed_standard_chart(db)
        print(f"✅ Chart of accounts: {added} accounts added")

        counter = await ensure_journal_counter(db)
        print(f"✅ Journal counter '{counter.counter_key}' ready (prefix {counter.prefix})")

        await seed_exchange_rates(db)
        await seed_users(db)

        print("\n🎉 Ledger seeding completed successfully!")


if __name__ == "__main__":
    asyncio.run(seed())
