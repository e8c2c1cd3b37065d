"""Exception handlers — every error leaves the API as a JSON envelope.

Learn: Services raise AppError subclasses; store and framework errors
are translated here so clients never see driver-specific shapes:
- AppError               → its own status_code
- RequestValidationError → 400 with the field messages joined
- IntegrityError         → 409 (duplicate key slipped past a pre-check)
- HTTPException          → its status (unknown routes, wrong methods)
- anything else          → 500, generic message, full details logged

Non-production responses also carry the stack trace.
"""

import traceback

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from issuetracker.config import settings
from issuetracker.errors import AppError

logger = structlog.get_logger()


def _envelope(message: str, status_code: int, exc: Exception, headers=None) -> JSONResponse:
    content = {"success": False, "message": message}
    if not settings.is_production:
        content["stack"] = "".join(
            traceback.format_exception(type(exc), exc, exc.__traceback__)
        )
    return JSONResponse(status_code=status_code, content=content, headers=headers)


def _validation_message(exc: RequestValidationError) -> str:
    messages = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        msg = err.get("msg", "Invalid value").removeprefix("Value error, ")
        messages.append(f"{'.'.join(loc)}: {msg}" if loc else msg)
    return ". ".join(messages) or "Validation error"


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        log = logger.error if exc.status_code >= 500 else logger.warning
        log(
            "request.app_error",
            error_type=type(exc).__name__,
            detail=exc.message,
            status_code=exc.status_code,
            path=request.url.path,
        )
        headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
        return _envelope(exc.message, exc.status_code, exc, headers)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        message = _validation_message(exc)
        logger.warning("request.validation_error", detail=message, path=request.url.path)
        return _envelope(message, 400, exc)

    @app.exception_handler(IntegrityError)
    async def integrity_error_handler(request: Request, exc: IntegrityError):
        logger.warning("request.integrity_error", error=str(exc.orig), path=request.url.path)
        return _envelope("Resource already exists", 409, exc)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        message = str(exc.detail)
        if exc.status_code == 404 and message == "Not Found":
            message = f"Route {request.url.path} not found"
        return _envelope(message, exc.status_code, exc, getattr(exc, "headers", None))

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception(
            "request.unhandled_exception",
            error=str(exc),
            error_type=type(exc).__name__,
            path=request.url.path,
        )
        return _envelope("Internal server error", 500, exc)
