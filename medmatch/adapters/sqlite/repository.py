"""
SQLite Repository - Account credential storage.

Features:
- Async operations via aiosqlite
- Email uniqueness enforced by a UNIQUE constraint at write time
- Each insert is its own transaction, rolled back on any failure
- Every query bounded by a timeout
"""

from __future__ import annotations

import asyncio
import logging
import secrets
from collections.abc import Awaitable
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, TypeVar

import aiosqlite

from medmatch.config.errors import StorageError
from medmatch.domains.accounts import Account, DuplicateEmailError

logger = logging.getLogger(__name__)

__all__ = ["AccountRepository"]

T = TypeVar("T")


def _new_id() -> str:
    """Opaque 24-hex-char identifier."""
    return secrets.token_hex(12)


class AccountRepository:
    """
    SQLite repository for accounts.

    Example:
        >>> repo = AccountRepository("data/medmatch.db")
        >>> await repo.initialize()
        >>> account = await repo.insert("a@test.com", hashed)
        >>> await repo.find_by_email("a@test.com")
    """

    def __init__(self, db_path: str | Path, timeout: float = 5.0) -> None:
        """
        Initialize repository.

        Args:
            db_path: Path to SQLite database file
            timeout: Seconds allowed per query before raising StorageError
        """
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self.timeout = timeout
        self._connection: aiosqlite.Connection | None = None
        self._write_lock = asyncio.Lock()

    async def _get_connection(self) -> aiosqlite.Connection:
        """Get or create database connection."""
        if self._connection is None:
            self._connection = await aiosqlite.connect(str(self.db_path))
            self._connection.row_factory = aiosqlite.Row
        return self._connection

    async def _bounded(self, operation: Awaitable[T]) -> T:
        try:
            return await asyncio.wait_for(operation, timeout=self.timeout)
        except asyncio.TimeoutError as e:
            logger.error("Query exceeded %.1fs timeout on %s", self.timeout, self.db_path)
            raise StorageError("Credential store timed out") from e

    async def initialize(self) -> None:
        """Initialize database schema."""
        conn = await self._get_connection()

        await conn.executescript("""
            CREATE TABLE IF NOT EXISTS accounts (
                id TEXT PRIMARY KEY,
                email TEXT NOT NULL UNIQUE,
                password TEXT NOT NULL,
                entry_date TIMESTAMP NOT NULL
            );
        """)

        await conn.commit()
        logger.info("Database initialized: %s", self.db_path)

    async def insert(self, email: str, password_hash: str) -> Account:
        """
        Insert an account. ``email`` must already be normalized.

        Raises:
            DuplicateEmailError: if the email is taken
        """
        account = Account(
            id=_new_id(),
            email=email,
            password=password_hash,
            entry_date=datetime.now(timezone.utc),
        )
        await self._bounded(self._insert(account))
        return account

    async def _insert(self, account: Account) -> None:
        conn = await self._get_connection()
        # One write transaction at a time on the shared connection
        async with self._write_lock:
            try:
                await conn.execute(
                    "INSERT INTO accounts (id, email, password, entry_date) VALUES (?, ?, ?, ?)",
                    (
                        account.id,
                        account.email,
                        account.password,
                        account.entry_date.isoformat(),
                    ),
                )
                await conn.commit()
            except aiosqlite.IntegrityError as e:
                await conn.rollback()
                if "accounts.email" in str(e):
                    raise DuplicateEmailError(account.email) from e
                raise
            except BaseException:
                # Includes cancellation by the query timeout
                await conn.rollback()
                raise

    async def find_by_email(self, email: str) -> Account | None:
        """Get account by exact email."""
        row = await self._bounded(
            self._fetch_one("SELECT * FROM accounts WHERE email = ?", (email,))
        )
        return _to_account(row) if row else None

    async def get(self, account_id: str) -> Account | None:
        """Get account by ID."""
        row = await self._bounded(
            self._fetch_one("SELECT * FROM accounts WHERE id = ?", (account_id,))
        )
        return _to_account(row) if row else None

    async def count(self) -> int:
        """Get total account count."""
        row = await self._bounded(self._fetch_one("SELECT COUNT(*) FROM accounts", ()))
        return row[0] if row else 0

    async def _fetch_one(self, sql: str, params: tuple[Any, ...]) -> aiosqlite.Row | None:
        conn = await self._get_connection()
        async with conn.execute(sql, params) as cursor:
            return await cursor.fetchone()

    async def close(self) -> None:
        """Close database connection."""
        if self._connection:
            await self._connection.close()
            self._connection = None


def _to_account(row: aiosqlite.Row) -> Account:
    return Account(
        id=row["id"],
        email=row["email"],
        password=row["password"],
        entry_date=datetime.fromisoformat(row["entry_date"]),
    )
