"""
In-memory book store for the FastAPI application.

``BookStore`` owns the collection of book records and implements the five
operations the API exposes. Records are kept in a dict keyed by id; dict
ordering gives list results in insertion order and updates replace values
in place, so a record keeps its position for its whole lifetime.

All public methods take the same re-entrant lock, which makes the store
safe to share between requests dispatched on FastAPI's threadpool.
"""

import secrets
from datetime import datetime, timezone
from threading import RLock
from typing import Dict, List, Optional, Set

import structlog

from api.errors import BookInternalError, BookNotFoundError, BookValidationError
from api.models import Book, BookPayload, BookSummary

logger = structlog.get_logger(__name__)

# secrets.token_urlsafe(12) yields 16 URL-safe characters
ID_BYTES = 12


def utc_timestamp() -> str:
    """Return the current UTC time as an ISO-8601 string with millisecond precision."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def is_finished(page_count: Optional[int], read_page: Optional[int]) -> bool:
    """A book is finished when the last page read is the last page."""
    return page_count == read_page


class BookStore:
    """Owned, thread-safe collection of book records."""

    def __init__(self):
        self._books: Dict[str, Book] = {}
        self._issued_ids: Set[str] = set()
        self._lock = RLock()

    def add_book(self, payload: BookPayload) -> str:
        """
        Validate a payload and store it as a new book.

        Args:
            payload: Book fields supplied by the client

        Returns:
            The generated book id

        Raises:
            BookValidationError: name is missing or readPage exceeds pageCount
            BookInternalError: the new record could not be read back
        """
        self._validate(payload, action="add")

        with self._lock:
            book_id = self._generate_id()
            timestamp = utc_timestamp()
            book = Book(
                id=book_id,
                **self._mutable_fields(payload),
                inserted_at=timestamp,
                updated_at=timestamp,
            )
            self._books[book_id] = book

            if book_id not in self._books:
                logger.error("Book missing after insert", book_id=book_id)
                raise BookInternalError("Book could not be added")

        logger.info("Book added", book_id=book_id, name=book.name)
        return book_id

    def list_books(
        self,
        name: Optional[str] = None,
        reading: Optional[bool] = None,
        finished: Optional[bool] = None,
    ) -> List[BookSummary]:
        """
        List books as ``{id, name, publisher}`` projections.

        Only one filter applies per call. ``name`` (case-insensitive
        substring) wins over ``reading``, which wins over ``finished``.

        Args:
            name: Substring to look for in the book name
            reading: Required value of the ``reading`` flag
            finished: Required value of the ``finished`` flag

        Returns:
            Matching projections in insertion order
        """
        with self._lock:
            books = list(self._books.values())

        if name:
            needle = name.lower()
            books = [book for book in books if needle in book.name.lower()]
        elif reading is not None:
            books = [book for book in books if book.reading == reading]
        elif finished is not None:
            books = [book for book in books if book.finished == finished]

        return [
            BookSummary(id=book.id, name=book.name, publisher=book.publisher)
            for book in books
        ]

    def get_book(self, book_id: str) -> Book:
        """Return the book with ``book_id`` or raise ``BookNotFoundError``."""
        with self._lock:
            book = self._books.get(book_id)

        if book is None:
            raise BookNotFoundError("Book not found")
        return book

    def update_book(self, book_id: str, payload: BookPayload) -> Book:
        """
        Replace every mutable field of a book.

        Fields omitted from the payload are cleared rather than kept from
        the previous record. ``id`` and ``insertedAt`` never change.

        Raises:
            BookValidationError: name is missing or readPage exceeds pageCount
            BookNotFoundError: no book has this id
        """
        self._validate(payload, action="update")

        with self._lock:
            current = self._books.get(book_id)
            if current is None:
                logger.debug("Update of unknown book rejected", book_id=book_id)
                raise BookNotFoundError("Failed to update book. Id not found")

            updated = Book(
                id=current.id,
                **self._mutable_fields(payload),
                inserted_at=current.inserted_at,
                updated_at=utc_timestamp(),
            )
            self._books[book_id] = updated

        logger.info("Book updated", book_id=book_id)
        return updated

    def delete_book(self, book_id: str) -> None:
        """Remove a book, raising ``BookNotFoundError`` if it does not exist."""
        with self._lock:
            if self._books.pop(book_id, None) is None:
                logger.debug("Delete of unknown book rejected", book_id=book_id)
                raise BookNotFoundError("Failed to delete book. Id not found")

        logger.info("Book deleted", book_id=book_id)

    def count(self) -> int:
        with self._lock:
            return len(self._books)

    def clear(self) -> None:
        """Drop every record. Issued ids stay reserved."""
        with self._lock:
            self._books.clear()
        logger.info("Book store cleared")

    @staticmethod
    def _validate(payload: BookPayload, action: str) -> None:
        if payload.name is None or not payload.name.strip():
            logger.warning("Book rejected: missing name", action=action)
            raise BookValidationError(f"Failed to {action} book. Please provide the book name")

        if (
            payload.read_page is not None
            and payload.page_count is not None
            and payload.read_page > payload.page_count
        ):
            logger.warning(
                "Book rejected: readPage exceeds pageCount",
                action=action,
                read_page=payload.read_page,
                page_count=payload.page_count,
            )
            raise BookValidationError(
                f"Failed to {action} book. readPage cannot be greater than pageCount"
            )

    @staticmethod
    def _mutable_fields(payload: BookPayload) -> dict:
        fields = payload.model_dump()
        fields["finished"] = is_finished(payload.page_count, payload.read_page)
        return fields

    def _generate_id(self) -> str:
        # Caller holds the lock.
        book_id = secrets.token_urlsafe(ID_BYTES)
        while book_id in self._issued_ids:
            book_id = secrets.token_urlsafe(ID_BYTES)
        self._issued_ids.add(book_id)
        return book_id
