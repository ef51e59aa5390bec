"""
Authentication - Access token gate and refresh token cookie.

Flow:
    Login/signup → refresh token (cookie + body) and access token (body)
    Protected requests → Authorization: Bearer <access token>
    POST /api/accounts/token → new access token from the refresh token
"""

from .cookies import REFRESH_COOKIE, REFRESH_COOKIE_MAX_AGE, clear_refresh_cookie, set_refresh_cookie
from .deps import authenticate

__all__ = [
    "authenticate",
    "REFRESH_COOKIE",
    "REFRESH_COOKIE_MAX_AGE",
    "set_refresh_cookie",
    "clear_refresh_cookie",
]
