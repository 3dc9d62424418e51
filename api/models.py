"""
API request and response models for authgate REST endpoints.

These Pydantic v2 models define the HTTP transport contract. They are
intentionally separate from the dataclasses in auth/models.py, which own the
internal domain representation. Route handlers map between the two.

Request models are also where syntactic validation lives: a body that fails
here never reaches AuthService and is answered with 400.
"""

import re
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from auth.models import Principal

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

# bcrypt only looks at the first 72 bytes of a password.
PASSWORD_MAX_BYTES = 72

PASSWORD_SPECIALS = "@$!%*#?&"
_PASSWORD_CHARSET = re.compile(r"[A-Za-z0-9@$!%*#?&]+")


def _check_bcrypt_length(value: str) -> str:
    if len(value.encode("utf-8")) > PASSWORD_MAX_BYTES:
        raise ValueError(f"Password must be at most {PASSWORD_MAX_BYTES} bytes")
    return value


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class SignUpRequest(BaseModel):
    """Request body for POST /auth/signup."""

    model_config = ConfigDict(extra="forbid")

    email: EmailStr = Field(description="User email address", examples=["user@example.com"])
    name: str = Field(min_length=3, max_length=255, description="Display name (minimum 3 characters)")
    password: str = Field(
        min_length=8,
        max_length=PASSWORD_MAX_BYTES,
        description="At least 8 characters with one letter, one number and one of @$!%*#?&",
        examples=["Password123!"],
    )

    @field_validator("password")
    @classmethod
    def password_strength(cls, value: str) -> str:
        """Require a letter, a digit and a special character, and nothing outside that alphabet.

        Kept as a validator rather than Field(pattern=...) because pydantic-core's
        regex engine has no lookahead support.
        """
        _check_bcrypt_length(value)
        if not _PASSWORD_CHARSET.fullmatch(value):
            raise ValueError(f"Password may only contain letters, numbers and {PASSWORD_SPECIALS}")
        if not re.search(r"[A-Za-z]", value) or not re.search(r"[0-9]", value):
            raise ValueError("Password must contain at least one letter, one number, and one special character")
        if not any(c in PASSWORD_SPECIALS for c in value):
            raise ValueError("Password must contain at least one letter, one number, and one special character")
        return value


class SignInRequest(BaseModel):
    """Request body for POST /auth/signin.

    No strength rules here: an old or mistyped password must still get the
    generic 401 rather than a 400 that hints at the policy.
    """

    model_config = ConfigDict(extra="forbid")

    email: EmailStr
    password: str = Field(min_length=1, max_length=255)

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        return _check_bcrypt_length(value)


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class UserResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    email: str
    name: str

    @classmethod
    def from_principal(cls, principal: Principal) -> "UserResponse":
        return cls(email=principal.email, name=principal.name)


class AuthUserResponse(BaseModel):
    """Body of signup, signin and check: {"user": {"email", "name"}}."""

    user: UserResponse


class MessageResponse(BaseModel):
    message: str


class ProtectedResponse(BaseModel):
    message: str
    user: UserResponse


class ErrorResponse(BaseModel):
    """Uniform error envelope returned by every exception handler."""

    message: str
    code: str
    detail: Optional[Any] = None


class HealthResponse(BaseModel):
    status: str = "healthy"
    version: str
    components: dict[str, str] = Field(default_factory=dict)
