"""
auth/passwords.py -- One-way salted password hashing (bcrypt).

Using bcrypt directly rather than passlib[bcrypt] because passlib's internal
wrap-bug detection creates a password longer than 72 bytes, which bcrypt 4.x
rejects with an explicit error. Direct bcrypt usage is simpler and has no
compatibility shim.

Cost factor is 10 rounds. Library failures (e.g. a corrupt stored hash) are
not caught here -- they propagate and surface as a 500.

Layer rule: no imports from api/.
"""

from __future__ import annotations

import bcrypt

BCRYPT_ROUNDS = 10


class PasswordHasher:
    """bcrypt hash/verify with a timing-equalization helper.

    Usage:
        hasher = PasswordHasher()
        stored = hasher.hash("Passw0rd!")
        hasher.verify("Passw0rd!", stored)   # True
    """

    def __init__(self, rounds: int = BCRYPT_ROUNDS) -> None:
        self.rounds = rounds
        # Computed once so the first failed lookup is not measurably faster or
        # slower than later ones. See verify_dummy().
        self._dummy_hash = self.hash("authgate_timing_dummy")

    def hash(self, plain: str) -> str:
        """Return a bcrypt hash of the plaintext password.

        bcrypt rejects or truncates input past 72 bytes. The request models in
        api/models.py refuse any password whose UTF-8 encoding exceeds that.
        """
        return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt(rounds=self.rounds)).decode("utf-8")

    def verify(self, plain: str, hashed: str) -> bool:
        """Return True if the plaintext password matches the bcrypt hash."""
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))

    def verify_dummy(self, plain: str) -> bool:
        """Burn one bcrypt comparison and return False.

        Called when the account does not exist so that an unknown email costs
        the same as a wrong password and response time does not reveal which.
        """
        self.verify(plain, self._dummy_hash)
        return False
