"""
auth/tokens.py -- Signed, time-bounded session tokens (JWT via python-jose).

Security design decisions:
  JWT: python-jose with HS256. Tokens carry only the subject (user id as a
       string, as RFC 7519 requires for "sub"), iat and exp. Nothing about the
       user beyond the id is embedded -- the guard re-fetches the identity on
       every request, so a deleted account stops working immediately.

  Lifetime: TOKEN_TTL is fixed at 24 hours. It is not read from Settings.

  Expiry is checked here against an injectable clock rather than inside
       jose.jwt.decode(). jose checks exp against the wall clock, which makes
       the boundary untestable; verify_exp=False hands the check to us.

  Tokens are stateless and never persisted. Logout clears the cookie only;
       a copied token remains valid until exp. There is no revocation list.

Layer rule: no imports from api/.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from auth.errors import TokenError, TokenErrorKind
from auth.models import SessionClaims

TOKEN_TTL = timedelta(hours=24)

_ALGORITHM = "HS256"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TokenIssuer:
    """Issue and verify session tokens signed with the server secret.

    Pure and stateless after construction -- safe to share across requests
    and threads.
    """

    def __init__(self, secret_key: str, clock: Callable[[], datetime] = _utcnow) -> None:
        self._secret_key = secret_key
        self._clock = clock
        self.ttl_seconds = int(TOKEN_TTL.total_seconds())

    def issue(self, user_id: int) -> str:
        """Encode a signed JWT for user_id, valid for TOKEN_TTL from now."""
        issued_at = int(self._clock().timestamp())
        payload = {
            "sub": str(user_id),
            "iat": issued_at,
            "exp": issued_at + self.ttl_seconds,
        }
        return jwt.encode(payload, self._secret_key, algorithm=_ALGORITHM)

    def verify(self, token: str) -> SessionClaims:
        """Decode and verify a token.

        Raises TokenError(INVALID) for anything that is not a well-formed,
        correctly signed token with integer iat/exp and a numeric subject;
        TokenError(EXPIRED) once the clock is past exp.
        """
        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[_ALGORITHM],
                options={"verify_exp": False},
            )
        except JWTError as exc:
            raise TokenError(TokenErrorKind.INVALID) from exc

        sub, iat, exp = payload.get("sub"), payload.get("iat"), payload.get("exp")
        if not isinstance(sub, str) or not sub.isdigit():
            raise TokenError(TokenErrorKind.INVALID)
        if not isinstance(iat, int) or not isinstance(exp, int):
            raise TokenError(TokenErrorKind.INVALID)

        if self._clock().timestamp() > exp:
            raise TokenError(TokenErrorKind.EXPIRED)
        return SessionClaims(sub=int(sub), iat=iat, exp=exp)
