"""
Request logging and correlation IDs.

Every log record emitted while a request is being handled carries the
request's correlation_id, so journal writer logs can be matched to the
API call that triggered them.
"""

import contextvars
import logging
import time
import uuid
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from freight_ledger.app.core.config import settings

logger = logging.getLogger("freight_ledger.requests")

correlation_id_var = contextvars.ContextVar("correlation_id", default="-")


class CorrelationIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = correlation_id_var.get()
        return True


def configure_logging() -> None:
    """Configure root logging once at startup."""
    handler = logging.StreamHandler()
    handler.addFilter(CorrelationIdFilter())
    handler.setFormatter(logging.Formatter(
        "%(asctime)s %(levelname)s [%(name)s] [%(correlation_id)s] %(message)s"
    ))
    logging.basicConfig(level=settings.log_level.upper(), handlers=[handler], force=True)


class ObservabilityMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        correlation_id = request.headers.get("X-Correlation-ID") or uuid.uuid4().hex
        token = correlation_id_var.set(correlation_id)

        started = time.perf_counter()
        try:
            response = await call_next(request)
            duration_ms = round((time.perf_counter() - started) * 1000, 2)

            response.headers["X-Correlation-ID"] = correlation_id
            response.headers["X-Process-Time"] = str(duration_ms)

            level = logging.INFO
            if response.status_code >= 500:
                level = logging.ERROR
            elif response.status_code >= 400:
                level = logging.WARNING
            logger.log(
                level,
                "%s %s -> %s",
                request.method,
                request.url.path,
                response.status_code,
                extra={"status_code": response.status_code, "duration_ms": duration_ms},
            )
            return response
        finally:
            correlation_id_var.reset(token)
