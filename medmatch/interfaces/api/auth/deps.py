"""
Authentication Dependencies - Request gate for protected routes.

Clients send the access token in the Authorization header.
We verify it and attach the identity to the request before any handler runs.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import Depends, Header, Request

from medmatch.config.errors import UnauthorizedError
from medmatch.domains.accounts import Identity, InvalidTokenError, TokenIssuer
from medmatch.interfaces.api.deps import get_token_issuer

logger = logging.getLogger(__name__)


async def authenticate(
    request: Request,
    authorization: Optional[str] = Header(None),
    issuer: TokenIssuer = Depends(get_token_issuer),
) -> Identity:
    """
    Verify the access token and return the caller's identity.

    Expects 'Authorization: Bearer <token>' header. Mount on a router with
    ``APIRouter(dependencies=[Depends(authenticate)])`` to protect every route.

    Returns:
        Identity with email and id, also stored on ``request.state.account``

    Raises:
        UnauthorizedError if authentication fails
    """
    if not authorization:
        raise UnauthorizedError("Missing authentication header")

    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise UnauthorizedError("Invalid authentication scheme")

    try:
        identity = issuer.verify_access(parts[1])
    except InvalidTokenError:
        logger.info("Rejected access token on %s", request.url.path)
        raise UnauthorizedError("Invalid access token")

    request.state.account = identity
    return identity
