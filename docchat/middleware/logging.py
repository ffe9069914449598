"""
Request logging middleware with correlation ids
"""

import time
import logging
import uuid
from typing import Any, Dict, Iterable, Optional

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"

# Probes and docs are too noisy to log per request
QUIET_PATHS = ("/healthz", "/readyz", "/docs", "/openapi.json", "/redoc")


def client_ip(request: Request) -> str:
    """Caller address, preferring the first hop of X-Forwarded-For"""
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    if request.client:
        return request.client.host
    return "unknown"


class StructuredLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs one event when a request arrives and one when it leaves, tagged with
    a correlation id. An incoming X-Correlation-ID is reused so that calls
    from the frontend can be traced; otherwise a fresh one is generated.
    The id is exposed on request.state and echoed on the response.
    """

    def __init__(self, app, quiet_paths: Optional[Iterable[str]] = None):
        super().__init__(app)
        self.quiet_paths = set(quiet_paths or QUIET_PATHS)

    async def dispatch(self, request: Request, call_next):
        if request.url.path in self.quiet_paths:
            return await call_next(request)

        correlation_id = request.headers.get(CORRELATION_HEADER) or str(uuid.uuid4())
        request.state.correlation_id = correlation_id
        fields = self._request_fields(request, correlation_id)
        started = time.perf_counter()

        logger.info(f"{request.method} {request.url.path} received", extra={**fields, "event_type": "request"})

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                f"{request.method} {request.url.path} failed: {type(e).__name__}",
                extra={**fields, "event_type": "error", "duration_ms": self._elapsed_ms(started)},
                exc_info=True,
            )
            raise

        logger.info(
            f"{request.method} {request.url.path} -> {response.status_code}",
            extra={
                **fields,
                "event_type": "response",
                "status_code": response.status_code,
                "duration_ms": self._elapsed_ms(started),
            },
        )
        response.headers[CORRELATION_HEADER] = correlation_id
        return response

    @staticmethod
    def _request_fields(request: Request, correlation_id: str) -> Dict[str, Any]:
        return {
            "correlation_id": correlation_id,
            "method": request.method,
            "path": request.url.path,
            "client_ip": client_ip(request),
        }

    @staticmethod
    def _elapsed_ms(started: float) -> float:
        return round((time.perf_counter() - started) * 1000, 2)
