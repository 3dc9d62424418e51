"""
auth/service.py -- Signup / signin / check / logout orchestration.

AuthService is synchronous on purpose. bcrypt is CPU-bound; routes calling
it are plain `def` handlers, which FastAPI runs in its threadpool, so a
slow hash never stalls other requests on the event loop.

Error policy:
  AuthError (CONFLICT, UNAUTHENTICATED) passes through unchanged -- the HTTP
  layer maps it to 409/401.
  Anything else is logged with the operation and email, then re-raised
  unchanged. Nothing is swallowed; the generic handler turns it into a 500.

Signin never reveals which check failed: unknown email and wrong password
raise the identical AuthError, and the unknown-email path still pays for one
bcrypt comparison (PasswordHasher.verify_dummy) so timing matches too.

Layer rule: no imports from api/.
"""

from __future__ import annotations

import logging

from auth.errors import INVALID_CREDENTIALS, AuthError
from auth.models import AuthResult, Principal
from auth.passwords import PasswordHasher
from auth.store import CredentialStore
from auth.tokens import TokenIssuer


class AuthService:
    def __init__(
        self,
        store: CredentialStore,
        hasher: PasswordHasher,
        issuer: TokenIssuer,
        logger: logging.Logger | None = None,
    ) -> None:
        self._store = store
        self._hasher = hasher
        self._issuer = issuer
        self._logger = logger or logging.getLogger("authgate.auth.service")

    def sign_up(self, email: str, name: str, password: str) -> AuthResult:
        """Register a new account and open a session for it.

        Raises AuthError(CONFLICT) if the email is taken. The find_by_email()
        pre-check only gives the common case a fast answer; a concurrent
        duplicate is caught by the store's UNIQUE constraint and surfaces as
        the same CONFLICT.
        """
        try:
            if self._store.find_by_email(email) is not None:
                raise AuthError.conflict()
            identity = self._store.insert(email, name, self._hasher.hash(password))
            token = self._issuer.issue(identity.id)
        except AuthError as exc:
            self._logger.warning("Sign up rejected (%s): %s", exc.kind.value, email)
            raise
        except Exception:
            self._logger.exception("Error during sign up: %s", email)
            raise
        self._logger.info("New user registered: %s", email)
        return AuthResult(token=token, principal=Principal.from_identity(identity))

    def sign_in(self, email: str, password: str) -> AuthResult:
        """Verify credentials and open a session.

        Raises AuthError(UNAUTHENTICATED, "Invalid credentials") for an unknown
        email and for a wrong password alike.
        """
        try:
            identity = self._store.find_by_email(email)
            if identity is None:
                self._hasher.verify_dummy(password)
                self._logger.warning("Sign in attempt with unknown email: %s", email)
                raise AuthError.unauthenticated(INVALID_CREDENTIALS)
            if not self._hasher.verify(password, identity.password_hash):
                self._logger.warning("Invalid password attempt for email: %s", email)
                raise AuthError.unauthenticated(INVALID_CREDENTIALS)
            token = self._issuer.issue(identity.id)
        except AuthError:
            raise
        except Exception:
            self._logger.exception("Error during sign in: %s", email)
            raise
        self._logger.info("User signed in: %s", email)
        return AuthResult(token=token, principal=Principal.from_identity(identity))

    def check_auth(self, principal: Principal) -> Principal:
        """Pass-through of the guard-attached principal."""
        return principal

    def logout(self) -> None:
        """Nothing to do server-side.

        Sessions are stateless; the transport clears the cookie. A token copied
        before logout stays valid until it expires.
        """
        self._logger.debug("Logout requested")
