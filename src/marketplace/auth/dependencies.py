"""FastAPI auth dependencies.

Learn: get_current_user is used as Depends() on every protected route.
It is a pure gate:

    no "Authorization: Bearer ..." header → 401
    token fails verification              → 401
    token verifies                        → CurrentIdentity(user_id)

It never loads the user row — handlers that need name/email/phone ask
the credential store themselves.
"""

from dataclasses import dataclass
from typing import Optional

import structlog
from fastapi import Depends, Header, Request

from marketplace.auth.tokens import TokenError, TokenService
from marketplace.errors import UnauthorizedError

BEARER_PREFIX = "Bearer "


@dataclass(frozen=True)
class CurrentIdentity:
    """The authenticated caller. Only the id — the record stays in the store."""

    user_id: int


def get_token_service(request: Request) -> TokenService:
    return request.app.state.ctx.tokens


async def get_current_user(
    authorization: Optional[str] = Header(None),
    tokens: TokenService = Depends(get_token_service),
) -> CurrentIdentity:
    """Extract current identity (required — 401 if no valid token)."""
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        raise UnauthorizedError("Authentication required")

    token = authorization[len(BEARER_PREFIX):].strip()
    try:
        claims = tokens.verify(token)
    except TokenError as e:
        raise UnauthorizedError(str(e))

    # Bound in the request task; a sync dependency would bind in a worker thread
    structlog.contextvars.bind_contextvars(user_id=claims.user_id)
    return CurrentIdentity(user_id=claims.user_id)
