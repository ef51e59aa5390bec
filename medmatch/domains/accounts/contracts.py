"""
Account Contracts - Interfaces for the accounts domain.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from .models import Account


class DuplicateEmailError(Exception):
    """Raised by a credential store when an insert collides on email."""

    def __init__(self, email: str) -> None:
        self.email = email
        super().__init__(f"Duplicate email: {email}")


@runtime_checkable
class CredentialStore(Protocol):
    """Contract for account persistence."""

    async def find_by_email(self, email: str) -> Account | None:
        """Find an account by its normalized email."""
        ...

    async def insert(self, email: str, password_hash: str) -> Account:
        """
        Persist a new account.

        Raises:
            DuplicateEmailError: if the email is already taken
        """
        ...


@runtime_checkable
class PasswordHasher(Protocol):
    """Contract for one-way password hashing."""

    def hash(self, password: str) -> str:
        ...

    def verify(self, password: str, hashed: str) -> bool:
        ...
