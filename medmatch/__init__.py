"""
Medmatch - Accounts and authentication service for the Medmatch platform.

Example:
    >>> from medmatch.domains.accounts import AuthService
    >>> service = AuthService(store, hasher, issuer)
    >>> account = await service.login("a@test.com", "pw")
"""

__version__ = "1.0.0"
__all__ = ["__version__"]
