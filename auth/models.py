"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic beyond mapping). Stores,
the service and routes do the work.

Boundary rule: UserIdentity carries password_hash and never leaves auth/.
Everything that crosses into api/ is a Principal.

Layer rule: no imports from api/.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class UserIdentity:
    """A registered account as persisted by CredentialStore.

    Created on signup and never updated or deleted by the service. email is
    unique at the storage layer (UNIQUE constraint on users.email).
    """

    email: str
    name: str
    password_hash: str
    id: int | None = None
    created_at: str | None = None


@dataclass(frozen=True)
class Principal:
    """The verified identity attached to a request after a successful guard pass."""

    email: str
    name: str

    @classmethod
    def from_identity(cls, identity: UserIdentity) -> Principal:
        return cls(email=identity.email, name=identity.name)


@dataclass(frozen=True)
class SessionClaims:
    """Verified contents of a session token. Tokens are never persisted."""

    sub: int  # user id
    iat: int  # issued-at, unix seconds
    exp: int  # expiry, unix seconds (iat + 24h)


@dataclass(frozen=True)
class AuthResult:
    """What signup and signin hand to the transport layer: a token for the cookie, a principal for the body."""

    token: str
    principal: Principal
