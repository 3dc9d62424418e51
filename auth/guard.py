"""
auth/guard.py -- Request authentication: cookie -> token -> identity -> Principal.

State machine:
  Unauthenticated -> NoToken                         -> reject
  Unauthenticated -> TokenPresent -> Invalid/Expired -> reject
  Unauthenticated -> TokenPresent -> Valid -> subject gone -> reject
  Unauthenticated -> TokenPresent -> Valid -> subject found -> Principal

Every reject is the same AuthError(UNAUTHENTICATED). The specific reason is
logged at DEBUG and never reaches the client, so a caller cannot distinguish
a forged token from an expired one or from a deleted account.

AuthGuard itself is framework-free. api/middleware.py runs it as an explicit
middleware stage and attaches the result to request.state.principal;
get_principal() is the Depends() helper handlers use to read it back.

Layer rule: no imports from api/. This module may import from fastapi because
get_principal() is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import NoReturn

from fastapi import Request

from auth.cookies import SessionCookieCodec
from auth.errors import AuthError, TokenError
from auth.models import Principal
from auth.store import CredentialStore
from auth.tokens import TokenIssuer


class AuthGuard:
    def __init__(
        self,
        store: CredentialStore,
        issuer: TokenIssuer,
        codec: SessionCookieCodec,
        logger: logging.Logger | None = None,
    ) -> None:
        self._store = store
        self._issuer = issuer
        self._codec = codec
        self._logger = logger or logging.getLogger("authgate.auth.guard")

    def authenticate(self, cookies: Mapping[str, str]) -> Principal:
        """Resolve the request's session cookie to a Principal or raise AuthError(UNAUTHENTICATED).

        Hits the store once per call (fail closed on deleted users), so run
        it off the event loop.
        """
        token = self._codec.decode(cookies)
        if token is None:
            self._reject("no_token")

        try:
            claims = self._issuer.verify(token)
        except TokenError as exc:
            self._reject(exc.kind.value)

        identity = self._store.find_by_id(claims.sub)
        if identity is None:
            self._reject("unknown_subject", claims.sub)
        return Principal.from_identity(identity)

    def _reject(self, reason: str, subject: int | None = None) -> NoReturn:
        if subject is None:
            self._logger.debug("Rejected request: %s", reason)
        else:
            self._logger.debug("Rejected request: %s (sub=%s)", reason, subject)
        raise AuthError.unauthenticated()


def get_principal(request: Request) -> Principal:
    """Return the Principal attached by the guard middleware.

    Use as a FastAPI dependency on guarded routes:
        @router.get("/auth/check")
        def check(principal: Principal = Depends(get_principal)): ...

    Raises AuthError(UNAUTHENTICATED) if the route was not registered as
    protected, rather than serving the handler without an identity.
    """
    principal = getattr(request.state, "principal", None)
    if principal is None:
        raise AuthError.unauthenticated()
    return principal
