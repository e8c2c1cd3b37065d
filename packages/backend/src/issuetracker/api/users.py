"""Users API — registration, login, current user.

Learn: Routes for user authentication:
- POST /users/register → create account, returns user + token
- POST /users/login → email/password → user + token
- GET /users/me → the user behind the bearer token
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from issuetracker.auth.dependencies import get_current_user_record
from issuetracker.db.engine import get_db
from issuetracker.db.models import User
from issuetracker.schemas.common import Envelope, ok
from issuetracker.schemas.user import AuthResult, LoginRequest, RegisterRequest, UserRead
from issuetracker.services.user_service import UserService

router = APIRouter(prefix="/users")


def _user_svc(db: AsyncSession = Depends(get_db)) -> UserService:
    return UserService(db)


@router.post("/register", response_model=Envelope[AuthResult], status_code=201)
async def register(body: RegisterRequest, svc: UserService = Depends(_user_svc)):
    """Create a new user account."""
    result = await svc.register(body.email, body.password)
    return ok("User registered successfully", result)


@router.post("/login", response_model=Envelope[AuthResult])
async def login(body: LoginRequest, svc: UserService = Depends(_user_svc)):
    """Login with email and password → user + JWT."""
    result = await svc.login(body.email, body.password)
    return ok("Login successful", result)


@router.get("/me", response_model=Envelope[UserRead])
async def get_me(user: User = Depends(get_current_user_record)):
    """Get the current authenticated user's info."""
    return ok("User retrieved successfully", UserRead.model_validate(user))
