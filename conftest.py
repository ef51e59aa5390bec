"""Shared pytest configuration and fixtures."""

from __future__ import annotations

import os
import secrets
from datetime import datetime, timedelta, timezone

import pytest

# Settings are read at import time by the API module
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("ACCESS_TOKEN_SECRET", "test-access-secret-0123456789abcdef")
os.environ.setdefault("REFRESH_TOKEN_SECRET", "test-refresh-secret-0123456789abcdef")

from medmatch.domains.accounts import (  # noqa: E402
    Account,
    AuthService,
    BcryptPasswordHasher,
    DuplicateEmailError,
    TokenIssuer,
)

ACCESS_SECRET = os.environ["ACCESS_TOKEN_SECRET"]
REFRESH_SECRET = os.environ["REFRESH_TOKEN_SECRET"]


class FakeClock:
    """Settable clock for token expiry tests."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


class InMemoryCredentialStore:
    """Dict-backed credential store with the same uniqueness rule as SQLite."""

    def __init__(self) -> None:
        self.accounts: dict[str, Account] = {}

    async def find_by_email(self, email: str) -> Account | None:
        return self.accounts.get(email)

    async def insert(self, email: str, password_hash: str) -> Account:
        if email in self.accounts:
            raise DuplicateEmailError(email)
        account = Account(
            id=secrets.token_hex(12),
            email=email,
            password=password_hash,
            entry_date=datetime.now(timezone.utc),
        )
        self.accounts[email] = account
        return account


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime.now(timezone.utc))


@pytest.fixture
def issuer(clock: FakeClock) -> TokenIssuer:
    return TokenIssuer(access_secret=ACCESS_SECRET, refresh_secret=REFRESH_SECRET, clock=clock)


@pytest.fixture
def hasher() -> BcryptPasswordHasher:
    # Minimum cost keeps the suite fast
    return BcryptPasswordHasher(rounds=4)


@pytest.fixture
def memory_store() -> InMemoryCredentialStore:
    return InMemoryCredentialStore()


@pytest.fixture
def auth_service(
    memory_store: InMemoryCredentialStore,
    hasher: BcryptPasswordHasher,
    issuer: TokenIssuer,
) -> AuthService:
    return AuthService(memory_store, hasher, issuer)
