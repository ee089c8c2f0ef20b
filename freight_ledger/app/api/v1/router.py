"""
API v1 Router.

Aggregates all v1 API endpoints.
"""

from fastapi import APIRouter
from freight_ledger.app.api.v1.endpoints import (
    auth, admin,
    ledger_events, journal_entries,
    chart_of_accounts, exchange_rates, reports
)

router = APIRouter()

# Authentication endpoints
router.include_router(auth.router)

# Admin endpoints (users, audit trail)
router.include_router(admin.router)

# Business events -> posted journal entries
router.include_router(ledger_events.router)

# Journal browsing, manual entries and lifecycle
router.include_router(journal_entries.router)

# Reference data
router.include_router(chart_of_accounts.router)
router.include_router(exchange_rates.router)

# Reports
router.include_router(reports.router)
