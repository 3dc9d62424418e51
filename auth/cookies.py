"""
auth/cookies.py -- Session token <-> transport cookie mapping.

Cookie attributes:
  httponly=True always: JS cannot read the cookie (XSS mitigation).
  secure: only in production, where the service sits behind HTTPS.
  samesite: "strict" in production; "lax" in development so the frontend dev
      server on another port can still complete top-level navigations.
  path="/": one cookie for the whole API.
  max_age: TOKEN_TTL, so cookie and token expire together.

Exactly one token lives under exactly one cookie name. The name comes from
Settings.cookie_name and is shared by encode() and decode().

Layer rule: no imports from api/. apply() only needs an object with a
Starlette-compatible set_cookie().
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Literal

from auth.tokens import TOKEN_TTL

SameSite = Literal["lax", "strict"]


@dataclass(frozen=True)
class CookieDirective:
    """A fully specified Set-Cookie instruction for the transport layer."""

    key: str
    value: str
    max_age: int
    httponly: bool
    secure: bool
    samesite: SameSite
    path: str = "/"
    expires: int | None = None

    def apply(self, response) -> None:
        """Write this directive onto a FastAPI/Starlette response."""
        response.set_cookie(
            self.key,
            value=self.value,
            max_age=self.max_age,
            expires=self.expires,
            path=self.path,
            secure=self.secure,
            httponly=self.httponly,
            samesite=self.samesite,
        )


class SessionCookieCodec:
    def __init__(self, cookie_name: str, production: bool) -> None:
        self.cookie_name = cookie_name
        self.production = production

    def _directive(self, value: str, max_age: int, expires: int | None = None) -> CookieDirective:
        return CookieDirective(
            key=self.cookie_name,
            value=value,
            max_age=max_age,
            expires=expires,
            httponly=True,
            secure=self.production,
            samesite="strict" if self.production else "lax",
            path="/",
        )

    def encode(self, token: str) -> CookieDirective:
        """Directive that stores the session token for TOKEN_TTL."""
        return self._directive(token, int(TOKEN_TTL.total_seconds()))

    def clear(self) -> CookieDirective:
        """Directive that makes the browser drop the session cookie immediately.

        Attributes other than value/expiry must match encode() or browsers
        treat it as a different cookie and keep the original.
        """
        return self._directive("", 0, expires=0)

    def decode(self, cookies: Mapping[str, str]) -> str | None:
        """Return the session token from a request cookie jar, or None."""
        token = cookies.get(self.cookie_name)
        return token or None
