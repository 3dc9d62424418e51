"""
api/routes/auth.py -- Authentication REST endpoints.

Routes:
  POST /auth/signup   -- register; sets session cookie; 201
  POST /auth/signin   -- password login; sets session cookie; 200
  POST /auth/logout   -- clears session cookie; 200
  GET  /auth/check    -- current principal (guarded)

Auth policy:
  signup/signin/logout are public. Clearing a cookie needs no prior auth.
  /auth/check is listed in PROTECTED_PATHS; AuthGuardMiddleware authenticates
  it before the handler runs.

Security:
  signin answers unknown email and wrong password with the same 401 body.
  Cache-Control: no-store on responses that set a session cookie.

signup and signin are plain `def` so FastAPI runs them (and bcrypt) in the
threadpool instead of on the event loop.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from api.models import (
    AuthUserResponse,
    ErrorResponse,
    MessageResponse,
    SignInRequest,
    SignUpRequest,
    UserResponse,
)
from auth.cookies import SessionCookieCodec
from auth.guard import get_principal
from auth.models import AuthResult, Principal
from auth.service import AuthService

PROTECTED_PATHS = ("/auth/check",)

router = APIRouter(prefix="/auth")

_VALIDATION = {400: {"model": ErrorResponse, "description": "Validation error"}}
_UNAUTHENTICATED = {401: {"model": ErrorResponse, "description": "Not authenticated"}}


@router.post(
    "/signup",
    status_code=201,
    response_model=AuthUserResponse,
    responses={**_VALIDATION, 409: {"model": ErrorResponse, "description": "Email already in use"}},
)
def sign_up(request: Request, body: SignUpRequest) -> JSONResponse:
    """Register a new user and start a session."""
    service: AuthService = request.app.state.auth_service
    result = service.sign_up(body.email, body.name, body.password)
    return _session_response(request, 201, result)


@router.post(
    "/signin",
    response_model=AuthUserResponse,
    responses={**_VALIDATION, 401: {"model": ErrorResponse, "description": "Invalid credentials"}},
)
def sign_in(request: Request, body: SignInRequest) -> JSONResponse:
    """Sign in an existing user and start a session."""
    service: AuthService = request.app.state.auth_service
    result = service.sign_in(body.email, body.password)
    return _session_response(request, 200, result)


@router.post("/logout", response_model=MessageResponse)
async def logout(request: Request) -> JSONResponse:
    """Clear the session cookie.

    Stateless sessions: the token itself is not revoked, only removed from
    the browser.
    """
    service: AuthService = request.app.state.auth_service
    codec: SessionCookieCodec = request.app.state.cookie_codec
    service.logout()
    resp = JSONResponse(content=MessageResponse(message="User successfully signed out").model_dump())
    codec.clear().apply(resp)
    return resp


@router.get("/check", response_model=AuthUserResponse, responses=_UNAUTHENTICATED)
async def check_auth(request: Request, principal: Principal = Depends(get_principal)) -> AuthUserResponse:
    """Return the authenticated user."""
    service: AuthService = request.app.state.auth_service
    return AuthUserResponse(user=UserResponse.from_principal(service.check_auth(principal)))


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _session_response(request: Request, status_code: int, result: AuthResult) -> JSONResponse:
    codec: SessionCookieCodec = request.app.state.cookie_codec
    resp = JSONResponse(
        status_code=status_code,
        content=AuthUserResponse(user=UserResponse.from_principal(result.principal)).model_dump(),
    )
    codec.encode(result.token).apply(resp)
    resp.headers["Cache-Control"] = "no-store"
    return resp
