"""
api/routes/app.py -- Application-level endpoints outside /auth.

  GET /           -- public greeting
  GET /protected  -- sample guarded resource; echoes the principal
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from api.models import ErrorResponse, ProtectedResponse, UserResponse
from auth.guard import get_principal
from auth.models import Principal

PROTECTED_PATHS = ("/protected",)

router = APIRouter()


@router.get("/", response_class=PlainTextResponse)
async def hello() -> str:
    return "Hello World!"


@router.get(
    "/protected",
    response_model=ProtectedResponse,
    responses={401: {"model": ErrorResponse, "description": "Unauthorized"}},
)
async def protected(principal: Principal = Depends(get_principal)) -> ProtectedResponse:
    """Protected endpoint -- requires authentication."""
    return ProtectedResponse(message="This is a protected endpoint", user=UserResponse.from_principal(principal))
