"""
api/errors.py -- Error envelope and exception handlers.

AuthError kinds map to status codes through one table. The table is checked
against AuthErrorKind at import time, so adding a kind without deciding its
status fails at startup instead of falling through to a 500.

All handlers return the same ErrorResponse envelope so clients can parse
errors uniformly.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.models import ErrorResponse
from auth.errors import AuthError, AuthErrorKind

STATUS_BY_KIND: dict[AuthErrorKind, int] = {
    AuthErrorKind.CONFLICT: 409,
    AuthErrorKind.UNAUTHENTICATED: 401,
}

_unmapped = set(AuthErrorKind) - set(STATUS_BY_KIND)
if _unmapped:
    raise RuntimeError(f"AuthErrorKind without HTTP status: {sorted(k.value for k in _unmapped)}")


def error_response(status_code: int, code: str, message: str, detail=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(message=message, code=code, detail=detail).model_dump(),
    )


def auth_error_response(exc: AuthError) -> JSONResponse:
    return error_response(STATUS_BY_KIND[exc.kind], exc.kind.value, exc.message)


def _field_errors(exc: RequestValidationError) -> list[dict]:
    """Flatten pydantic errors to [{"field": "password", "message": "..."}].

    The first loc element is the source ("body", "query"); drop it. Raw
    exc.errors() may carry exception objects in ctx, which are not JSON.
    """
    errors = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ())[1:]]
        errors.append({"field": ".".join(loc), "message": err.get("msg", "")})
    return errors


def register_exception_handlers(app: FastAPI, logger: logging.Logger) -> None:
    @app.exception_handler(AuthError)
    async def auth_error_handler(request: Request, exc: AuthError) -> JSONResponse:
        return auth_error_response(exc)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """Return 400 with field-level errors when the request body fails validation."""
        return error_response(400, "validation_error", "Request validation failed.", _field_errors(exc))

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return error_response(exc.status_code, f"http_{exc.status_code}", str(exc.detail))

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Catch-all handler for unexpected server errors.

        The exception is logged with the request context; the client receives
        only a generic message.
        """
        logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
        return error_response(500, "internal_error", "An unexpected error occurred.")
