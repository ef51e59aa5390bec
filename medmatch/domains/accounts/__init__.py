"""
Accounts Domain - Credentials, password hashing and token lifecycle.

This domain handles:
- Login and signup against a credential store
- bcrypt password hashing
- Refresh/access token signing and verification
"""

from .contracts import CredentialStore, DuplicateEmailError, PasswordHasher
from .hasher import BcryptPasswordHasher
from .models import Account, Identity, normalize_email
from .service import INVALID_CREDENTIALS, INVALID_REFRESH_TOKEN, AuthService
from .tokens import ACCESS_TOKEN_TTL, REFRESH_TOKEN_TTL, InvalidTokenError, TokenIssuer

__all__ = [
    "CredentialStore",
    "PasswordHasher",
    "DuplicateEmailError",
    "Account",
    "Identity",
    "normalize_email",
    "BcryptPasswordHasher",
    "TokenIssuer",
    "InvalidTokenError",
    "ACCESS_TOKEN_TTL",
    "REFRESH_TOKEN_TTL",
    "AuthService",
    "INVALID_CREDENTIALS",
    "INVALID_REFRESH_TOKEN",
]
