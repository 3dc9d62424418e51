"""
api/main.py -- FastAPI application entry point for authgate.

Run with:  uvicorn asgi:app --reload
           python main.py

Middleware chain (outermost to innermost):
  1. CORSMiddleware       -- FRONTEND_URL only, credentials allowed (cookies)
  2. RequestLogMiddleware -- one log line per request
  3. AuthGuardMiddleware  -- authenticates PROTECTED_PATHS, short-circuits 401

Lifespan handles startup (logging, store, auth collaborators) and shutdown
(close the store) symmetrically. Every collaborator is built here and hung on
app.state; nothing in auth/ reads global state.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.openapi.utils import get_openapi

from api.errors import register_exception_handlers
from api.middleware import AuthGuardMiddleware, RequestLogMiddleware
from api.models import HealthResponse
from api.routes.app import PROTECTED_PATHS as APP_PROTECTED_PATHS
from api.routes.app import router as app_router
from api.routes.auth import PROTECTED_PATHS as AUTH_PROTECTED_PATHS
from api.routes.auth import router as auth_router
from auth.cookies import SessionCookieCodec
from auth.guard import AuthGuard
from auth.passwords import PasswordHasher
from auth.service import AuthService
from auth.store import CredentialStore
from auth.tokens import TokenIssuer
from core.config import Settings, get_settings
from core.logs import component_logger, configure_logging

VERSION = "1.0.0"

PROTECTED_PATHS = (*AUTH_PROTECTED_PATHS, *APP_PROTECTED_PATHS)

_settings = get_settings()
logger = component_logger("api")


# ---------------------------------------------------------------------------
# Wiring
# ---------------------------------------------------------------------------


def init_auth_state(app: FastAPI, settings: Settings, store: CredentialStore | None = None) -> None:
    """Build the authentication collaborators from settings and attach them to app.state.

    Tests pass their own in-memory store; production opens DATABASE_URL.
    """
    store = store or CredentialStore(settings.database_url)
    issuer = TokenIssuer(settings.secret_key)
    codec = SessionCookieCodec(settings.cookie_name, production=settings.is_production)

    app.state.credential_store = store
    app.state.cookie_codec = codec
    app.state.auth_guard = AuthGuard(store, issuer, codec, logger=component_logger("auth.guard"))
    app.state.auth_service = AuthService(
        store,
        PasswordHasher(),
        issuer,
        logger=component_logger("auth.service"),
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings = get_settings()
    configure_logging(settings)
    logger.info("authgate API starting up (environment=%s)", settings.environment)
    init_auth_state(app, settings)
    logger.info("Auth initialized (cookie=%s, secure=%s)", settings.cookie_name, settings.is_production)

    yield

    app.state.credential_store.close()
    logger.info("authgate API shutdown complete")


# ---------------------------------------------------------------------------
# App instantiation
# ---------------------------------------------------------------------------

app = FastAPI(
    title="authgate API",
    description="Authentication API. Sessions travel in an httpOnly cookie set on signup/signin.",
    version=VERSION,
    lifespan=lifespan,
    docs_url="/api",
    redoc_url=None,
)

# ---------------------------------------------------------------------------
# Middleware stack
#
# Starlette wraps each add_middleware() call around everything registered
# before it, so the LAST one added is the outermost. Register innermost first.
# CORS must be outermost so 401s from the guard still carry CORS headers.
# ---------------------------------------------------------------------------

app.add_middleware(AuthGuardMiddleware, protected_paths=PROTECTED_PATHS)
app.add_middleware(RequestLogMiddleware, logger=logger)
app.add_middleware(
    CORSMiddleware,
    allow_origins=[_settings.frontend_url],
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type"],
    max_age=3600,
)

register_exception_handlers(app, logger)

# ---------------------------------------------------------------------------
# Router registration
# ---------------------------------------------------------------------------

app.include_router(auth_router, tags=["Authentication"])
app.include_router(app_router, tags=["Application"])


# ---------------------------------------------------------------------------
# Health endpoint
#
# Defined directly in main.py (not in a router) so it is always reachable
# regardless of router registration state.
# ---------------------------------------------------------------------------


@app.get("/health", tags=["Health"])
def health(request: Request) -> HealthResponse:
    """Return API liveness, version and database reachability."""
    store: CredentialStore = request.app.state.credential_store
    return HealthResponse(
        version=VERSION,
        components={"app": "ok", "database": "ok" if store.ping() else "error"},
    )


# ---------------------------------------------------------------------------
# OpenAPI -- declare the session cookie on guarded operations
# ---------------------------------------------------------------------------


def _openapi() -> dict:
    if app.openapi_schema:
        return app.openapi_schema
    schema = get_openapi(title=app.title, version=app.version, description=app.description, routes=app.routes)
    schema.setdefault("components", {})["securitySchemes"] = {
        "sessionCookie": {"type": "apiKey", "in": "cookie", "name": _settings.cookie_name},
    }
    for path in PROTECTED_PATHS:
        for operation in schema.get("paths", {}).get(path, {}).values():
            operation["security"] = [{"sessionCookie": []}]
    app.openapi_schema = schema
    return schema


app.openapi = _openapi
