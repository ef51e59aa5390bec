"""
Account Routes - Login, signup, logout and token refresh.

Authentication:
- login/signup/logout/token: public
- me: requires an access token
"""

from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Cookie, Depends, Request, Response
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from medmatch.config import Settings, get_settings
from medmatch.config.errors import RequestValidationFailed, validation_entry
from medmatch.domains.accounts import AuthService, Identity, normalize_email
from medmatch.interfaces.api.auth import (
    REFRESH_COOKIE,
    authenticate,
    clear_refresh_cookie,
    set_refresh_cookie,
)
from medmatch.interfaces.api.deps import get_auth_service

router = APIRouter()

# Every route on this router passes the access-token gate first
protected = APIRouter(dependencies=[Depends(authenticate)])


class Credentials(BaseModel):
    """Login and signup request body."""

    email: EmailStr
    password: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def normalize(cls, value: str) -> str:
        return normalize_email(value)


class RefreshTokenBody(BaseModel):
    """Token refresh request body. The cookie may carry the token instead."""

    refresh_token: Optional[str] = Field(default=None, alias="refreshToken")

    model_config = ConfigDict(populate_by_name=True)


def success(data: Any, message: str) -> dict[str, Any]:
    return {"status": "success", "data": data, "message": message}


async def add_tokens(
    response: Response,
    service: AuthService,
    email: str,
    account_id: str,
    secure: bool,
) -> tuple[str, str]:
    """
    Issue a refresh token, mint an access token from it, and set the cookie.

    Minting the access token through the refresh token re-checks that the
    pair matches a stored account.

    Returns:
        (access_token, refresh_token)
    """
    refresh_token = service.generate_refresh_token(email, account_id)
    access_token = await service.generate_access_token(refresh_token)
    set_refresh_cookie(response, refresh_token, secure=secure)
    return access_token, refresh_token


@router.post("/login")
async def login(
    credentials: Credentials,
    response: Response,
    service: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_settings),
) -> dict[str, Any]:
    """
    Validate credentials and start a session.

    - **email**: Account email
    - **password**: Account password

    Returns the account with `accessToken` and `refreshToken`; the refresh
    token is also set as an httponly cookie.
    """
    account = await service.login(credentials.email, credentials.password)
    access_token, refresh_token = await add_tokens(
        response, service, account.email, account.id, settings.is_production
    )
    return success(
        {**account.to_response(), "accessToken": access_token, "refreshToken": refresh_token},
        f"Account with email {account.email} logged in successfully",
    )


@router.post("/signup", status_code=201)
async def signup(
    credentials: Credentials,
    response: Response,
    service: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_settings),
) -> dict[str, Any]:
    """Create an account and start a session. 409 if the email is taken."""
    account = await service.signup(credentials.email, credentials.password)
    access_token, refresh_token = await add_tokens(
        response, service, account.email, account.id, settings.is_production
    )
    return success(
        {**account.to_response(), "accessToken": access_token, "refreshToken": refresh_token},
        f"Account with email {account.email} signed up successfully",
    )


@router.post("/logout")
async def logout(
    response: Response,
    settings: Settings = Depends(get_settings),
) -> dict[str, Any]:
    """Clear the refresh token cookie."""
    clear_refresh_cookie(response, secure=settings.is_production)
    return success(None, "Account logged out successfully")


@router.post("/token")
async def refresh_access_token(
    body: Optional[RefreshTokenBody] = None,
    refresh_cookie: Optional[str] = Cookie(default=None, alias=REFRESH_COOKIE),
    service: AuthService = Depends(get_auth_service),
) -> dict[str, Any]:
    """
    Mint a new access token from the refresh token.

    The token is read from the `refreshToken` cookie or the `refreshToken`
    body field. The cookie wins when both are present.
    """
    refresh_token = refresh_cookie or (body.refresh_token if body else None)
    if not refresh_token:
        raise RequestValidationFailed(
            [
                validation_entry(
                    "cookies", REFRESH_COOKIE, "Undefined or empty 'refreshToken' cookie"
                ),
                validation_entry(
                    "body", REFRESH_COOKIE, "Undefined or empty 'refreshToken' body"
                ),
            ]
        )

    access_token = await service.generate_access_token(refresh_token)
    return success(
        {"accessToken": access_token, "refreshToken": refresh_token},
        "Access token refreshed successfully",
    )


@protected.get("/me")
async def me(request: Request) -> dict[str, Any]:
    """Return the identity carried by the caller's access token."""
    identity: Identity = request.state.account
    return success(identity.model_dump(), "Authenticated account retrieved successfully")


router.include_router(protected)
