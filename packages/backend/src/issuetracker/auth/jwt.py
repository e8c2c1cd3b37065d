"""JWT token creation and verification.

Learn: JWT (JSON Web Token) provides stateless authentication.
There is a single long-lived access token (default 7 days); the token
is the only carrier of session state, nothing is stored server-side.

The token contains the user_id (sub) and email of the holder.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from issuetracker.config import settings


class InvalidTokenError(Exception):
    """Raised when token verification fails."""


class ExpiredTokenError(InvalidTokenError):
    """Signature is fine but the token is past its exp claim."""


class MalformedTokenError(InvalidTokenError):
    """Bad signature, bad structure, or missing claims."""


@dataclass(frozen=True)
class TokenIdentity:
    """Identity carried inside a verified token."""

    user_id: str
    email: str


def create_access_token(
    user_id: str,
    email: str,
    expires_days: Optional[int] = None,
) -> str:
    """Create a signed JWT access token."""
    now = datetime.now(timezone.utc)
    payload = {
        "sub": user_id,
        "email": email,
        "type": "access",
        "exp": now + timedelta(days=expires_days or settings.token_expire_days),
        "iat": now,
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def verify_token(token: str) -> TokenIdentity:
    """Verify and decode a JWT token.

    Raises ExpiredTokenError or MalformedTokenError (both InvalidTokenError).
    """
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["exp", "sub"]},
        )
    except jwt.ExpiredSignatureError:
        raise ExpiredTokenError("Token has expired")
    except jwt.InvalidTokenError as e:
        raise MalformedTokenError(f"Invalid token: {e}")

    if payload.get("type") != "access" or "email" not in payload:
        raise MalformedTokenError("Invalid token: unexpected claims")
    return TokenIdentity(user_id=payload["sub"], email=payload["email"])
