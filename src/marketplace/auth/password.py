"""Password hashing.

Learn: bcrypt includes a random salt in every digest ("$2b$10$<salt><hash>"),
so the same password hashes differently each time yet verifies without
storing the salt separately. The work factor is fixed per deployment
(default 10, see Settings.bcrypt_rounds). Passwords are truncated to
72 bytes (bcrypt's limit).
"""

import bcrypt

MAX_PASSWORD_BYTES = 72


class PasswordHasher:
    """One-way salted password hashing with a fixed work factor."""

    def __init__(self, rounds: int = 10):
        self.rounds = rounds

    def hash(self, password: str) -> str:
        pw_bytes = password.encode("utf-8")[:MAX_PASSWORD_BYTES]
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(pw_bytes, salt).decode("utf-8")

    def verify(self, password: str, password_hash: str) -> bool:
        """Check a password against a digest.

        A malformed or empty digest is a non-match, never an error.
        bcrypt.checkpw compares in constant time.
        """
        try:
            pw_bytes = password.encode("utf-8")[:MAX_PASSWORD_BYTES]
            return bcrypt.checkpw(pw_bytes, password_hash.encode("utf-8"))
        except (ValueError, TypeError, AttributeError):
            return False
