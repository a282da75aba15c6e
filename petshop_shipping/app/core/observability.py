"""
Observability Middleware and logging setup.

Adds correlation IDs and structured logging context to admin API requests.
"""

import time
import uuid
import logging
from typing import Optional
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from petshop_shipping.app.core.config import settings

# Configure structured logger
logger = logging.getLogger("petshop_shipping")

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(level: Optional[str] = None) -> None:
    """Attach a stream handler to the package logger (idempotent)."""
    logger.setLevel((level or settings.log_level).upper())
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)


def redact_token(token: Optional[str]) -> str:
    """Show only the tail of a bearer token in logs."""
    if not token:
        return "<none>"
    return f"***{token[-4:]}" if len(token) > 8 else "***"


CORRELATION_HEADER = "X-Correlation-ID"


class ObservabilityMiddleware(BaseHTTPMiddleware):
    """Tag each admin API request with a correlation id and log its outcome."""

    async def dispatch(self, request: Request, call_next) -> Response:
        correlation_id = request.headers.get(CORRELATION_HEADER) or str(uuid.uuid4())
        request.state.correlation_id = correlation_id

        started = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - started) * 1000

        response.headers[CORRELATION_HEADER] = correlation_id
        response.headers["X-Process-Time"] = f"{duration_ms:.2f}"

        log_data = {
            "correlation_id": correlation_id,
            "method": request.method,
            "path": request.url.path,
            "order_id": request.path_params.get("order_id"),
            "status_code": response.status_code,
            "duration_ms": round(duration_ms, 2),
        }

        # 5xx means the backend or this service failed; 4xx is a rejected edit
        if response.status_code >= 500:
            logger.error("Admin request failed", extra=log_data)
        elif response.status_code >= 400:
            logger.warning("Admin request rejected", extra=log_data)
        else:
            logger.info("Admin request", extra=log_data)

        return response
