"""
Password hashing using bcrypt.
"""

import bcrypt

# Fixed work factor for every stored credential
BCRYPT_ROUNDS = 10

# bcrypt only reads the first 72 bytes of its input
_BCRYPT_MAX_BYTES = 72


class PasswordHasher:
    """Salted one-way hashing and constant-time verification."""

    def __init__(self, rounds: int = BCRYPT_ROUNDS):
        self.rounds = rounds

    @staticmethod
    def _encode(password: str) -> bytes:
        return password.encode("utf-8")[:_BCRYPT_MAX_BYTES]

    def hash(self, password: str) -> str:
        """
        Hash a password with a fresh salt.

        Every call yields a different digest for the same input. Errors from
        the underlying library are not caught.
        """
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(self._encode(password), salt).decode("utf-8")

    def verify(self, plain_password: str, hashed_password: str) -> bool:
        """
        Check a password against a stored digest.

        Returns False on mismatch and on a digest bcrypt cannot parse.
        """
        try:
            return bcrypt.checkpw(
                self._encode(plain_password),
                hashed_password.encode("utf-8"),
            )
        except ValueError:
            return False

    def needs_rehash(self, hashed_password: str) -> bool:
        """True if the digest was produced with a different cost."""
        # Format: $2b$XX$... where XX is the cost
        parts = hashed_password.split("$")
        if len(parts) < 4 or not parts[2].isdigit():
            return True
        return int(parts[2]) != self.rounds

