"""
Password Hasher - bcrypt hashing and verification.
"""

from __future__ import annotations

import logging

import bcrypt

logger = logging.getLogger(__name__)

__all__ = ["BcryptPasswordHasher"]

# bcrypt only looks at the first 72 bytes of a password
_MAX_PASSWORD_BYTES = 72


def _encode(password: str) -> bytes:
    return password.encode("utf-8")[:_MAX_PASSWORD_BYTES]


class BcryptPasswordHasher:
    """
    Salted bcrypt hasher.

    Example:
        >>> hasher = BcryptPasswordHasher(rounds=10)
        >>> hashed = hasher.hash("secret")
        >>> hasher.verify("secret", hashed)
        True
    """

    def __init__(self, rounds: int = 10) -> None:
        self.rounds = rounds

    def hash(self, password: str) -> str:
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(_encode(password), salt).decode("utf-8")

    def verify(self, password: str, hashed: str) -> bool:
        """Check a password against a hash. Malformed hashes never match."""
        try:
            return bcrypt.checkpw(_encode(password), hashed.encode("utf-8"))
        except ValueError:
            logger.warning("Stored password hash is malformed")
            return False
