"""Response envelope shared by every endpoint.

Learn: Clients always get {success, message, data?}. Errors use the
same shape (built in error_handlers.py) so a client can branch on
`success` without looking at the status code.
"""

from typing import Generic, Optional, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class Envelope(BaseModel, Generic[T]):
    success: bool = True
    message: str
    data: Optional[T] = None


class Pagination(BaseModel):
    current_page: int
    total_pages: int
    total_items: int
    items_per_page: int
    has_next_page: bool
    has_prev_page: bool


def ok(message: str, data=None) -> dict:
    """Build a success envelope for a handler to return."""
    body = {"success": True, "message": message}
    if data is not None:
        body["data"] = data
    return body
