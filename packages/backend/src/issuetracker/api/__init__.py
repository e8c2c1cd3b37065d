"""API route aggregation.

All routers registered here get mounted in main.py.

Learn: Auth is applied at the include_router level using FastAPI's
dependencies parameter. This protects every issue route without
modifying individual handlers. Health and the user register/login
routes are open.
"""

from fastapi import APIRouter, Depends

from issuetracker.api.health import router as health_router
from issuetracker.api.issues import router as issues_router
from issuetracker.api.users import router as users_router
from issuetracker.auth.dependencies import get_current_user

# All protected routers require authentication
_auth = [Depends(get_current_user)]

api_router = APIRouter(prefix="/api")

# Open routes; /users/me declares its own auth dependency
api_router.include_router(users_router, tags=["users"])

# Protected routes require a valid bearer token
api_router.include_router(issues_router, tags=["issues"], dependencies=_auth)

# Liveness lives at the root, outside /api
root_router = APIRouter()
root_router.include_router(health_router, tags=["health"])
