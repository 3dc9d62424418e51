"""
api/middleware.py -- Middleware stages for the authgate API.

Route protection is an explicit stage in the middleware chain, not a
decorator on each handler. AuthGuardMiddleware looks at the request path:

  not protected  -> pass through untouched
  protected      -> AuthGuard.authenticate(cookies)
                      ok     -> request.state.principal = Principal; continue
                      reject -> short-circuit with the 401 envelope

Handlers behind it read the principal with Depends(auth.guard.get_principal).

The guard queries the store, so it runs in the threadpool.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Iterable

from fastapi import Request
from fastapi.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from api.errors import auth_error_response
from auth.errors import AuthError
from auth.guard import AuthGuard


class AuthGuardMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, protected_paths: Iterable[str]) -> None:
        super().__init__(app)
        self.protected_paths = frozenset(protected_paths)

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.url.path not in self.protected_paths:
            return await call_next(request)

        guard: AuthGuard = request.app.state.auth_guard
        try:
            principal = await run_in_threadpool(guard.authenticate, request.cookies)
        except AuthError as exc:
            return auth_error_response(exc)
        request.state.principal = principal
        return await call_next(request)


class RequestLogMiddleware(BaseHTTPMiddleware):
    """Log method, path, status, latency and client for every request."""

    def __init__(self, app, logger: logging.Logger) -> None:
        super().__init__(app)
        self.logger = logger

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        start = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            ms = (time.perf_counter() - start) * 1000
            self.logger.info(
                "%s %s %d %.1fms %s",
                request.method,
                request.url.path,
                status_code,
                ms,
                request.client.host if request.client else "unknown",
            )
