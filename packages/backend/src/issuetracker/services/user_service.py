"""User service — registration and login.

Learn: Both operations end the same way: a freshly issued access token
plus the public view of the user. Login failures are uniform: an
unknown email and a wrong password produce the same
InvalidCredentials error, and both pay for a bcrypt check, so a caller
can't probe which emails are registered.
"""

from typing import Optional

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from issuetracker.auth.jwt import create_access_token
from issuetracker.auth.password import burn_verification, hash_password, verify_password
from issuetracker.db.models import User
from issuetracker.errors import AlreadyExists, InvalidCredentials
from issuetracker.schemas.user import AuthResult, UserRead

logger = structlog.get_logger()


def _auth_result(user: User) -> AuthResult:
    return AuthResult(
        user=UserRead.model_validate(user),
        token=create_access_token(str(user.id), user.email),
    )


class UserService:
    """Business logic for credentials."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.email == email))
        return result.scalars().first()

    async def register(self, email: str, password: str) -> AuthResult:
        """Create a user and issue a token. Raises AlreadyExists on a taken email."""
        if await self.get_by_email(email):
            raise AlreadyExists("User with this email already exists")

        user = User(email=email, password_hash=hash_password(password))
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError:
            # Lost a race with a concurrent registration of the same email.
            await self.db.rollback()
            raise AlreadyExists("User with this email already exists")
        await self.db.refresh(user)

        logger.info("user.registered", user_id=str(user.id))
        return _auth_result(user)

    async def login(self, email: str, password: str) -> AuthResult:
        """Check credentials and issue a token. Raises InvalidCredentials."""
        user = await self.get_by_email(email)
        if user is None:
            burn_verification(password)
            logger.info("user.login_failed", reason="unknown_email")
            raise InvalidCredentials()

        if not verify_password(password, user.password_hash):
            logger.info("user.login_failed", reason="bad_password", user_id=str(user.id))
            raise InvalidCredentials()

        logger.info("user.logged_in", user_id=str(user.id))
        return _auth_result(user)
