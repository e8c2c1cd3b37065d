"""FastAPI auth dependencies.

Learn: These are used as Depends() in route handlers to extract
and validate the current user from the request.

Flow: Authorization: Bearer <jwt> → verify signature + expiry →
re-load the user by id. The re-load means a token for a user who no
longer exists is rejected, and every issue created downstream has an
owner that really exists.
"""

import uuid
from dataclasses import dataclass
from typing import Optional

import structlog
from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from issuetracker.auth.jwt import ExpiredTokenError, InvalidTokenError, verify_token
from issuetracker.db.engine import get_db
from issuetracker.db.models import User
from issuetracker.errors import Unauthenticated

logger = structlog.get_logger()


@dataclass(frozen=True)
class CurrentIdentity:
    """The authenticated user making the request."""

    user_id: uuid.UUID
    email: str


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Return the token from an 'Authorization: Bearer <token>' header, if any."""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


async def get_current_user_record(
    authorization: Optional[str] = Header(None),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Load the user behind the bearer token (401 if there is no valid token)."""
    token = extract_bearer_token(authorization)
    if token is None:
        raise Unauthenticated("Authentication required. Please provide a valid token.")

    try:
        claims = verify_token(token)
        user_id = uuid.UUID(claims.user_id)
    except (InvalidTokenError, ValueError) as e:
        reason = "expired" if isinstance(e, ExpiredTokenError) else "malformed"
        logger.info("auth.token_rejected", reason=reason)
        raise Unauthenticated("Invalid or expired token. Please login again.")

    user = await db.get(User, user_id)
    if user is None:
        logger.info("auth.token_rejected", reason="unknown_user", user_id=str(user_id))
        raise Unauthenticated("Invalid or expired token. Please login again.")

    return user


async def get_current_user(user: User = Depends(get_current_user_record)) -> CurrentIdentity:
    """Current identity for routes that only need the id and email."""
    return CurrentIdentity(user_id=user.id, email=user.email)
