"""
Token Issuer - Signs and verifies access and refresh tokens.

Two token classes, each with its own secret:
- refresh: 7 days, used only to mint access tokens
- access: 15 minutes, presented on every protected request

A leaked access secret therefore cannot be used to mint refresh tokens.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timedelta, timezone

import jwt
from pydantic import ValidationError

from .models import Identity

logger = logging.getLogger(__name__)

__all__ = [
    "ACCESS_TOKEN_TTL",
    "REFRESH_TOKEN_TTL",
    "InvalidTokenError",
    "TokenIssuer",
]

ACCESS_TOKEN_TTL = timedelta(minutes=15)
# The refresh cookie max-age is derived from this value
REFRESH_TOKEN_TTL = timedelta(days=7)


class InvalidTokenError(Exception):
    """Token failed verification. The reason is never exposed to clients."""


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TokenIssuer:
    """
    HMAC-signed JWT issuer/verifier.

    Example:
        >>> issuer = TokenIssuer(access_secret="a" * 32, refresh_secret="r" * 32)
        >>> token = issuer.sign_refresh("a@test.com", "65f0c0ffee0000000000beef")
        >>> issuer.verify_refresh(token).email
        'a@test.com'
    """

    def __init__(
        self,
        access_secret: str,
        refresh_secret: str,
        algorithm: str = "HS256",
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        """
        Initialize issuer.

        Args:
            access_secret: Key for access tokens
            refresh_secret: Key for refresh tokens
            algorithm: HMAC algorithm
            clock: Returns the current aware datetime; injectable for tests
        """
        self.access_secret = access_secret
        self.refresh_secret = refresh_secret
        self.algorithm = algorithm
        self._clock = clock

    def sign_refresh(self, email: str, account_id: str) -> str:
        return self._sign(email, account_id, self.refresh_secret, REFRESH_TOKEN_TTL)

    def sign_access(self, email: str, account_id: str) -> str:
        return self._sign(email, account_id, self.access_secret, ACCESS_TOKEN_TTL)

    def verify_refresh(self, token: str) -> Identity:
        return self.verify(token, self.refresh_secret)

    def verify_access(self, token: str) -> Identity:
        return self.verify(token, self.access_secret)

    def verify(self, token: str, secret: str) -> Identity:
        """
        Verify a token and return the identity it carries.

        Raises:
            InvalidTokenError: bad signature, expired, malformed, or the
                payload is not exactly ``{email, id}`` plus standard claims
        """
        try:
            # Expiry is checked below against the injected clock
            claims = jwt.decode(
                token,
                secret,
                algorithms=[self.algorithm],
                options={
                    "require": ["exp", "iat"],
                    "verify_exp": False,
                    "verify_iat": False,
                },
            )
        except jwt.InvalidTokenError as e:
            logger.debug("Token rejected: %s", e)
            raise InvalidTokenError("Invalid token") from e

        exp = claims["exp"]
        if not isinstance(exp, (int, float)) or exp <= self._clock().timestamp():
            logger.debug("Token rejected: expired")
            raise InvalidTokenError("Invalid token")

        try:
            return Identity.from_claims(claims)
        except ValidationError as e:
            logger.debug("Token rejected: bad payload shape (%d errors)", e.error_count())
            raise InvalidTokenError("Invalid token") from e

    def _sign(self, email: str, account_id: str, secret: str, ttl: timedelta) -> str:
        now = self._clock()
        payload = {
            "email": email,
            "id": account_id,
            "iat": int(now.timestamp()),
            "exp": int((now + ttl).timestamp()),
        }
        return jwt.encode(payload, secret, algorithm=self.algorithm)
