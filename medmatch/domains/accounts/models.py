"""
Account Models - Data types for the accounts domain.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# Registered JWT claims that may accompany the identity fields
STANDARD_CLAIMS = frozenset({"iat", "exp", "nbf", "iss", "aud", "sub", "jti"})


def normalize_email(email: str) -> str:
    """Canonical form used for storage and lookup."""
    return email.strip().lower()


class Account(BaseModel):
    """Credential-bearing identity record. ``password`` is always a hash."""

    id: str
    email: str
    password: str
    entry_date: datetime = Field(alias="entryDate")

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    def to_response(self) -> dict[str, Any]:
        """Serialize with wire field names."""
        return self.model_dump(mode="json", by_alias=True)


class Identity(BaseModel):
    """Identity carried inside access and refresh tokens."""

    email: str
    id: str

    model_config = ConfigDict(frozen=True, strict=True, extra="forbid")

    @classmethod
    def from_claims(cls, claims: dict[str, Any]) -> Identity:
        """
        Build an identity from decoded JWT claims.

        Standard claims are dropped; anything else beyond ``email`` and
        ``id`` fails validation.

        Raises:
            pydantic.ValidationError: if the payload shape is wrong
        """
        body = {k: v for k, v in claims.items() if k not in STANDARD_CLAIMS}
        return cls.model_validate(body)
