"""
API Dependencies - Dependency injection for FastAPI routes.

Provides singleton instances of the repository and auth collaborators.
"""

from __future__ import annotations

from functools import lru_cache

from fastapi import Depends

from medmatch.adapters.sqlite import AccountRepository
from medmatch.config import get_settings
from medmatch.domains.accounts import AuthService, BcryptPasswordHasher, TokenIssuer


@lru_cache
def get_account_repository() -> AccountRepository:
    """Get account repository singleton."""
    settings = get_settings()
    return AccountRepository(settings.db_path, timeout=settings.db_timeout_seconds)


@lru_cache
def get_password_hasher() -> BcryptPasswordHasher:
    return BcryptPasswordHasher(rounds=get_settings().bcrypt_rounds)


@lru_cache
def get_token_issuer() -> TokenIssuer:
    """Get token issuer singleton."""
    settings = get_settings()
    return TokenIssuer(
        access_secret=settings.access_token_secret.get_secret_value(),
        refresh_secret=settings.refresh_token_secret.get_secret_value(),
        algorithm=settings.jwt_algorithm,
    )


def get_auth_service(
    repo: AccountRepository = Depends(get_account_repository),
    hasher: BcryptPasswordHasher = Depends(get_password_hasher),
    issuer: TokenIssuer = Depends(get_token_issuer),
) -> AuthService:
    return AuthService(repo, hasher, issuer)


async def init_services() -> None:
    """
    Initialize services on startup.

    This should be called from the FastAPI lifespan handler.
    """
    repo = get_account_repository()
    await repo.initialize()


async def cleanup_services() -> None:
    """Cleanup services on shutdown."""
    repo = get_account_repository()
    await repo.close()
