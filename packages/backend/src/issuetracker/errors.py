"""Application error taxonomy.

Learn: Services raise these instead of HTTPException so they stay
usable outside a request (CLI, tests). error_handlers.py maps each
class to its HTTP status and renders the {success, message} envelope.
"""


class AppError(Exception):
    """Base class for errors that are safe to show to the client."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(AppError):
    """Malformed, missing, or out-of-domain input."""

    status_code = 400


class Unauthenticated(AppError):
    """Missing, invalid, or expired credentials."""

    status_code = 401


class InvalidCredentials(Unauthenticated):
    """Login failed. Same message for unknown email and wrong password."""

    def __init__(self, message: str = "Invalid email or password"):
        super().__init__(message)


class AlreadyExists(AppError):
    """A unique field (e.g. email) is already taken."""

    status_code = 409


class NotFound(AppError):
    status_code = 404


class InternalError(AppError):
    status_code = 500
