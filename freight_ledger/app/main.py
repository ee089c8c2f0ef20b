"""
Freight Ledger Service: FastAPI application.
"""

from contextlib import asynccontextmanager
from fastapi import Depends, FastAPI
from fastapi.exceptions import RequestValidationError
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.exceptions import HTTPException as StarletteHTTPException
from freight_ledger.app.core.config import settings
from freight_ledger.app.api.v1.router import router as api_v1_router
from freight_ledger.app.db.session import engine, get_db, Base
from freight_ledger.app.core.redis_client import close_redis, ping_redis
from freight_ledger.app.core.observability import ObservabilityMiddleware, configure_logging
from freight_ledger.app.core.exceptions import (
    AppException,
    app_exception_handler,
    http_exception_handler,
    validation_exception_handler,
    generic_exception_handler
)

# Every table must be registered with Base before create_all
from freight_ledger.app.models.user import User  # noqa: F401
from freight_ledger.app.models.audit_log import AuditLog  # noqa: F401
from freight_ledger.app.models.chart_of_accounts import Account  # noqa: F401
from freight_ledger.app.models.journal_entry import JournalEntry, JournalLine  # noqa: F401
from freight_ledger.app.models.document_counter import DocumentCounter  # noqa: F401
from freight_ledger.app.models.exchange_rate import ExchangeRate  # noqa: F401


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    await close_redis()
    await engine.dispose()


app = FastAPI(
    title=settings.app_name,
    version=settings.api_version,
    debug=settings.debug,
    description="Double-entry ledger posting service for freight forwarding",
    lifespan=lifespan,
)

app.add_middleware(ObservabilityMiddleware)

app.add_exception_handler(AppException, app_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, generic_exception_handler)

app.include_router(api_v1_router, prefix=f"/{settings.api_version}")


async def _database_up(db: AsyncSession) -> bool:
    try:
        await db.execute(text("SELECT 1"))
        return True
    except Exception:
        return False


@app.get("/health", tags=["Health"])
async def health_check(db: AsyncSession = Depends(get_db)):
    """
    Liveness plus dependency status.

    Redis being down degrades caching and revocation but does not stop
    posting, so status stays "healthy" as long as the process is up.
    """
    return {
        "status": "healthy",
        "database": "up" if await _database_up(db) else "down",
        "redis": "up" if await ping_redis() else "down",
        "version": settings.api_version,
        "base_currency": settings.base_currency,
        "strict_accounts": settings.ledger_strict_accounts,
    }


@app.get("/", tags=["Root"])
async def root():
    return {
        "message": f"Welcome to the {settings.app_name} API",
        "docs": "/docs",
        "health": "/health",
    }
