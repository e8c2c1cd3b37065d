"""Health check endpoint.

Learn: Simple GET endpoint that verifies the server is running and the
database is reachable. Always 200 while the process is alive; the
"status" field says whether dependencies are healthy or degraded.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from issuetracker import __version__
from issuetracker.config import settings
from issuetracker.db.engine import get_db

router = APIRouter()


@router.get("/health")
async def health_check(db: AsyncSession = Depends(get_db)):
    """Check server health and database connectivity."""
    checks = {"server": "ok"}

    try:
        await db.execute(text("SELECT 1"))
        checks["database"] = "ok"
    except Exception as e:
        checks["database"] = f"error: {e}"

    healthy = all(v == "ok" for v in checks.values())
    return {
        "success": True,
        "message": "Server is running",
        "status": "healthy" if healthy else "degraded",
        "version": __version__,
        "environment": settings.environment,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        **checks,
    }
