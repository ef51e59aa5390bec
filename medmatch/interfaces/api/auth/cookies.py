"""
Session Transport - Refresh token cookie handling.

The cookie is cleared with the same attributes it was set with; browsers
ignore a clear whose path or flags differ.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from fastapi import Response

from medmatch.domains.accounts import REFRESH_TOKEN_TTL

REFRESH_COOKIE = "refreshToken"
REFRESH_COOKIE_MAX_AGE = int(REFRESH_TOKEN_TTL.total_seconds())

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _cookie_attributes(secure: bool) -> dict[str, Any]:
    return {
        "httponly": True,
        "secure": secure,
        "samesite": "strict",
        "path": "/",
    }


def set_refresh_cookie(response: Response, token: str, secure: bool) -> None:
    response.set_cookie(
        REFRESH_COOKIE,
        token,
        max_age=REFRESH_COOKIE_MAX_AGE,
        **_cookie_attributes(secure),
    )


def clear_refresh_cookie(response: Response, secure: bool) -> None:
    response.set_cookie(
        REFRESH_COOKIE,
        "",
        max_age=0,
        expires=_EPOCH,
        **_cookie_attributes(secure),
    )
