"""
auth/errors.py -- Typed error kinds for the authentication core.

Callers never inspect an exception's shape to decide what happened. Every
domain failure is an AuthError carrying an AuthErrorKind, and the HTTP layer
maps kinds to status codes exhaustively (api/errors.py).

TokenError is internal to the token/guard pair: AuthGuard collapses both of
its kinds into AuthError(UNAUTHENTICATED) so clients cannot tell a forged
token from an expired one.

Layer rule: no imports from api/.
"""

from __future__ import annotations

from enum import Enum

INVALID_CREDENTIALS = "Invalid credentials"
EMAIL_TAKEN = "User with this email already exists"
AUTH_REQUIRED = "Unauthorized"


class AuthErrorKind(str, Enum):
    CONFLICT = "conflict"
    UNAUTHENTICATED = "unauthenticated"


class AuthError(Exception):
    """Domain failure raised by CredentialStore, AuthService and AuthGuard.

    These pass through the service and guard unmodified; only the transport
    boundary turns them into responses.
    """

    def __init__(self, kind: AuthErrorKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message

    @classmethod
    def conflict(cls, message: str = EMAIL_TAKEN) -> AuthError:
        return cls(AuthErrorKind.CONFLICT, message)

    @classmethod
    def unauthenticated(cls, message: str = AUTH_REQUIRED) -> AuthError:
        return cls(AuthErrorKind.UNAUTHENTICATED, message)

    def __repr__(self) -> str:
        return f"AuthError({self.kind.value!r}, {self.message!r})"


class TokenErrorKind(str, Enum):
    INVALID = "invalid"  # malformed, bad signature, missing/ill-typed claims
    EXPIRED = "expired"  # now > exp


class TokenError(Exception):
    def __init__(self, kind: TokenErrorKind) -> None:
        super().__init__(f"session token {kind.value}")
        self.kind = kind
