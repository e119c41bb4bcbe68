"""
Domain errors raised by the book store.

Each error carries the HTTP status code and the response ``status`` word
the API uses when reporting it, so the exception handlers in
``api.main`` can render any of them the same way.
"""

from fastapi import status


class BookshelfError(Exception):
    """Base class for errors reported to API clients."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    status: str = "error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class BookValidationError(BookshelfError):
    """Payload is missing a required field or breaks a numeric rule."""

    status_code = status.HTTP_400_BAD_REQUEST
    status = "fail"


class BookNotFoundError(BookshelfError):
    """No book with the requested id exists."""

    status_code = status.HTTP_404_NOT_FOUND
    status = "fail"


class BookInternalError(BookshelfError):
    """The store ended up in a state it should never reach."""
