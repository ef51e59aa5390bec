"""
Auth Service - Login, signup and token generation.

Every failure path collapses into one of two messages:
- "Invalid email or password" for login
- "Invalid refresh token" for access token generation

The detailed reason is logged, never returned, so responses cannot be used
to enumerate accounts or probe token validation.
"""

from __future__ import annotations

import asyncio
import logging

from medmatch.config.errors import AccountConflictError, UnauthorizedError

from .contracts import CredentialStore, DuplicateEmailError, PasswordHasher
from .models import Account, normalize_email
from .tokens import InvalidTokenError, TokenIssuer

logger = logging.getLogger(__name__)

__all__ = ["AuthService", "INVALID_CREDENTIALS", "INVALID_REFRESH_TOKEN"]

INVALID_CREDENTIALS = "Invalid email or password"
INVALID_REFRESH_TOKEN = "Invalid refresh token"


class AuthService:
    """
    Orchestrates the credential store, password hasher and token issuer.

    Example:
        >>> service = AuthService(repo, BcryptPasswordHasher(), issuer)
        >>> account = await service.signup("A@Test.com", "pw")
        >>> refresh = service.generate_refresh_token(account.email, account.id)
        >>> access = await service.generate_access_token(refresh)
    """

    def __init__(
        self,
        store: CredentialStore,
        hasher: PasswordHasher,
        issuer: TokenIssuer,
    ) -> None:
        self.store = store
        self.hasher = hasher
        self.issuer = issuer

    async def login(self, email: str, password: str) -> Account:
        """
        Check credentials and return the matching account.

        Raises:
            UnauthorizedError: unknown email or wrong password, same message
        """
        account = await self.store.find_by_email(normalize_email(email))
        if account is None:
            logger.info("Login failed: no account for email")
            raise UnauthorizedError(INVALID_CREDENTIALS)

        # bcrypt is CPU bound; keep it off the event loop
        valid = await asyncio.to_thread(self.hasher.verify, password, account.password)
        if not valid:
            logger.info("Login failed: password mismatch for account %s", account.id)
            raise UnauthorizedError(INVALID_CREDENTIALS)

        return account

    async def signup(self, email: str, password: str) -> Account:
        """
        Create an account with a hashed password.

        Raises:
            AccountConflictError: an account already uses this email
        """
        email = normalize_email(email)
        hashed = await asyncio.to_thread(self.hasher.hash, password)

        try:
            account = await self.store.insert(email, hashed)
        except DuplicateEmailError:
            logger.info("Signup conflict for existing email")
            raise AccountConflictError(f"Account with email {email} already exists")

        logger.info("Account %s created", account.id)
        return account

    def generate_refresh_token(self, email: str, account_id: str) -> str:
        """Sign a refresh token. The caller vouches for the identity pair."""
        return self.issuer.sign_refresh(email, account_id)

    async def generate_access_token(self, refresh_token: str) -> str:
        """
        Mint an access token from a refresh token.

        The refresh token must verify, carry exactly ``{email, id}``, and
        its ``id`` must match the account currently stored under ``email``.

        Raises:
            UnauthorizedError: on any of the above failing, same message
        """
        try:
            identity = self.issuer.verify_refresh(refresh_token)
        except InvalidTokenError:
            logger.info("Access token refused: refresh token did not verify")
            raise UnauthorizedError(INVALID_REFRESH_TOKEN)

        account = await self.store.find_by_email(identity.email)
        if account is None:
            logger.info("Access token refused: account no longer exists")
            raise UnauthorizedError(INVALID_REFRESH_TOKEN)

        if account.id != identity.id:
            logger.warning(
                "Access token refused: token id %s does not match account %s",
                identity.id,
                account.id,
            )
            raise UnauthorizedError(INVALID_REFRESH_TOKEN)

        return self.issuer.sign_access(identity.email, identity.id)
