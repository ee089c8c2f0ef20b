"""
Error types and the handlers that render them.

Every error response has the same body:
    {"error_code": ..., "message": ..., "details": {...}}
"""

import logging

from fastapi import Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


class AppException(Exception):
    """Base for errors raised by the ledger and its services."""

    error_code = "ERR_APP"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class ResourceNotFoundError(AppException):
    error_code = "ERR_NOT_FOUND_001"
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, resource: str, resource_id: Any = None):
        message = f"{resource} not found"
        if resource_id:
            message = f"{resource} with ID {resource_id} not found"
        super().__init__(message, {"resource": resource, "id": resource_id})


class AccountResolutionError(AppException):
    """One or more journal lines reference an account that does not exist."""

    error_code = "ERR_LEDGER_001"
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY

    def __init__(self, unresolved: List[str]):
        super().__init__(f"Account not found for: {', '.join(unresolved)}", {"unresolved": unresolved})


class UnbalancedEntryError(AppException):
    """Base-currency debits and credits of an entry disagree."""

    error_code = "ERR_LEDGER_002"
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY

    def __init__(self, total_debit: Any, total_credit: Any):
        super().__init__(
            f"Entry is not balanced. Debits ({total_debit}) must equal Credits ({total_credit})",
            {"total_debit": str(total_debit), "total_credit": str(total_credit)},
        )


class JournalNumberError(AppException):
    """No counter row to issue journal numbers from."""

    error_code = "ERR_LEDGER_003"
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    def __init__(self, counter_key: str):
        super().__init__(f"Counter key not found: {counter_key}", {"counter_key": counter_key})


class JournalStateError(AppException):
    """Lifecycle transition not allowed from the entry's current status."""

    error_code = "ERR_LEDGER_004"
    status_code = status.HTTP_409_CONFLICT


class LedgerValidationError(AppException):
    """Malformed lines or rates (negative amounts, both sides set, ...)."""

    error_code = "ERR_LEDGER_005"
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


# Handlers

HTTP_ERROR_CODES = {
    400: "ERR_BAD_REQUEST",
    401: "ERR_UNAUTHORIZED",
    403: "ERR_FORBIDDEN",
    404: "ERR_NOT_FOUND",
    405: "ERR_METHOD_NOT_ALLOWED",
    409: "ERR_CONFLICT",
    500: "ERR_INTERNAL_SERVER",
    503: "ERR_SERVICE_UNAVAILABLE",
}


def error_response(status_code: int, error_code: str, message: Any, details: dict = None, headers=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error_code": error_code, "message": message, "details": details or {}},
        headers=headers,
    )


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s: %s", exc.error_code, exc.message)
    return error_response(exc.status_code, exc.error_code, exc.message, exc.details)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return error_response(
        exc.status_code,
        HTTP_ERROR_CODES.get(exc.status_code, "ERR_UNKNOWN"),
        exc.detail,
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    # ctx may carry exception instances that JSONResponse cannot encode
    errors = [{key: value for key, value in error.items() if key != "ctx"} for error in exc.errors()]
    return error_response(
        status.HTTP_422_UNPROCESSABLE_ENTITY, "ERR_VALIDATION", "Validation error", {"errors": errors}
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR, "ERR_INTERNAL_SERVER", "An internal server error occurred"
    )
