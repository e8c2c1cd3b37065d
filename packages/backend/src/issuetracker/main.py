"""FastAPI application factory.

Learn: App factory pattern — create_app() returns a configured FastAPI
instance. Lifespan manages startup/shutdown: the database engine is
created before the first request and disposed on shutdown, Redis (for
rate limiting) is connected if available.
Middleware, CORS, exception handlers and routers are all registered here.
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from issuetracker import __version__
from issuetracker.api import api_router, root_router
from issuetracker.config import settings
from issuetracker.db.engine import close_db, init_db
from issuetracker.error_handlers import register_exception_handlers
from issuetracker.logging_config import configure_logging
from issuetracker.middleware.rate_limit import RateLimitMiddleware
from issuetracker.middleware.request_id import RequestIdMiddleware
from issuetracker.middleware.security import SecurityHeadersMiddleware
from issuetracker.redis_pool import close_redis, init_redis

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle.

    Learn: Anything before `yield` runs at startup, after `yield` runs
    at shutdown (SIGINT/SIGTERM under uvicorn).
    """
    logger.info(
        "issuetracker.starting",
        version=__version__,
        environment=settings.environment,
        port=settings.port,
    )

    init_db()
    logger.info("issuetracker.database_ready")

    try:
        await init_redis()
        logger.info("issuetracker.redis_connected", url=settings.redis_url)
    except Exception as e:
        # Redis is optional; without it rate limiting is skipped
        logger.warning("issuetracker.redis_unavailable", error=str(e))

    yield

    logger.info("issuetracker.shutdown")
    await close_redis()
    await close_db()


def create_app() -> FastAPI:
    """Build and return the FastAPI application."""
    configure_logging(settings.log_level, json_logs=settings.is_production)

    app = FastAPI(
        title="Issue Tracker",
        description="Issue tracking REST API — users, issues, filtering and status transitions",
        version=__version__,
        lifespan=lifespan,
    )

    # ── Middleware stack ──────────────────────────────────────
    # Note: Starlette middleware executes in reverse order of registration.
    # Request flow: CORS → RateLimit → Security → RequestId → handler

    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        RateLimitMiddleware,
        default_rpm=settings.rate_limit_rpm,
        auth_rpm=settings.rate_limit_auth_rpm,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    app.include_router(root_router)
    app.include_router(api_router)

    return app


# Default app instance (used by uvicorn: issuetracker.main:app)
app = create_app()
