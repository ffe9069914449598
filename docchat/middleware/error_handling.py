"""
Error handling: exception handlers and a catch-all middleware producing {code, message} errors
"""

import logging
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from docchat.core.config import settings
from docchat.deps.exceptions import DocChatError

logger = logging.getLogger(__name__)

ERROR_CODES = {
    400: "BAD_REQUEST",
    401: "AUTHENTICATION_REQUIRED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    409: "CONFLICT",
    422: "VALIDATION_ERROR",
    500: "INTERNAL_ERROR",
    502: "PROVIDER_UNAVAILABLE",
    503: "SERVICE_UNAVAILABLE",
    504: "GATEWAY_TIMEOUT"
}


def error_body(code: str, message: str) -> dict:
    return {"success": False, "error": {"code": code, "message": message}}


def get_error_code(status_code: int) -> str:
    return ERROR_CODES.get(status_code, "UNKNOWN_ERROR")


async def docchat_error_handler(request: Request, exc: DocChatError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{exc.code} on {request.url.path}: {exc.message}")
    else:
        logger.warning(f"{exc.code} on {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=error_body(exc.code, exc.message))


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Request validation failed")
    if location:
        message = f"{location}: {message}"

    logger.warning(f"Validation error on {request.url.path}: {message}")
    return JSONResponse(status_code=422, content=error_body("VALIDATION_ERROR", message))


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    logger.warning(f"HTTP exception: {exc.status_code} - {exc.detail}")
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(get_error_code(exc.status_code), str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DocChatError, docchat_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """
    Middleware turning unexpected exceptions into INTERNAL_ERROR responses
    """

    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)
        except DocChatError as e:
            return await docchat_error_handler(request, e)
        except Exception as e:
            return self._handle_unexpected_exception(e, request)

    def _handle_unexpected_exception(self, exc: Exception, request: Request) -> JSONResponse:
        """
        Handle unexpected exceptions without leaking implementation details

        Args:
            exc: Exception
            request: Request object

        Returns:
            JSON error response
        """
        logger.error(f"Unexpected exception: {type(exc).__name__} - {str(exc)}", exc_info=True)

        message = "Internal server error"
        # Include error details in development mode
        if settings.debug:
            message = f"{type(exc).__name__}: {str(exc)}"

        return JSONResponse(
            status_code=500,
            content=error_body("INTERNAL_ERROR", message)
        )
