"""
Error Taxonomy - Consistent error codes across the application.

Usage:
    from medmatch.config.errors import UnauthorizedError

    raise UnauthorizedError("Invalid email or password")

Every error carries the HTTP status it maps to, so a single exception
handler can render it without a lookup table.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Standardized error codes for machine-readable error responses."""

    # General errors
    NOT_FOUND = "NOT_FOUND"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    BAD_REQUEST = "BAD_REQUEST"
    CONFLICT = "CONFLICT"
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"
    RATE_LIMITED = "RATE_LIMITED"

    # Account errors
    ACCOUNT_NOT_FOUND = "ACCOUNT_NOT_FOUND"
    ACCOUNT_CONFLICT = "ACCOUNT_CONFLICT"

    # Storage errors
    STORAGE_UNAVAILABLE = "STORAGE_UNAVAILABLE"


class MedmatchError(Exception):
    """Base exception with error code and HTTP status support."""

    status_code: int = 500

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        status_code: int | None = None,
    ) -> None:
        self.code = code
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(f"[{code.value}] {message}")

    def to_dict(self) -> dict[str, Any]:
        """Convert to an entry of the error envelope's ``errors`` list."""
        return {
            "type": "http",
            "details": self.message,
            "code": self.code.value,
        }

    def to_entries(self) -> list[dict[str, Any]]:
        return [self.to_dict()]


class RequestValidationFailed(MedmatchError):
    """One or more request fields failed validation before reaching a service."""

    status_code = 400

    def __init__(self, errors: list[dict[str, Any]]) -> None:
        self.errors = errors
        super().__init__(ErrorCode.BAD_REQUEST, "Request validation failed")

    def to_entries(self) -> list[dict[str, Any]]:
        return list(self.errors)


def validation_entry(loc: str, field: str, details: str) -> dict[str, Any]:
    """Build a validation entry of the error envelope."""
    return {"type": "validation", "loc": loc, "field": field, "details": details}


class UnauthorizedError(MedmatchError):
    """Authentication failed. Messages are deliberately vague."""

    status_code = 401

    def __init__(
        self, message: str = "Unauthorized", code: ErrorCode = ErrorCode.UNAUTHORIZED
    ) -> None:
        super().__init__(code, message)


class NotFoundError(MedmatchError):
    status_code = 404

    def __init__(
        self, message: str = "Not found", code: ErrorCode = ErrorCode.NOT_FOUND
    ) -> None:
        super().__init__(code, message)


class ConflictError(MedmatchError):
    status_code = 409

    def __init__(
        self, message: str = "Conflict", code: ErrorCode = ErrorCode.CONFLICT
    ) -> None:
        super().__init__(code, message)


class AccountNotFoundError(NotFoundError):
    def __init__(self, message: str = "Account not found") -> None:
        super().__init__(message, ErrorCode.ACCOUNT_NOT_FOUND)


class AccountConflictError(ConflictError):
    def __init__(self, message: str = "Account already exists") -> None:
        super().__init__(message, ErrorCode.ACCOUNT_CONFLICT)


class StorageError(MedmatchError):
    """Storage/database errors."""

    status_code = 503

    def __init__(self, message: str = "Storage unavailable") -> None:
        super().__init__(ErrorCode.STORAGE_UNAVAILABLE, message)
