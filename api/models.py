"""
API models and schemas for the FastAPI application.

Attributes use snake_case in Python and camelCase on the wire, so every
model shares the same alias configuration.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model that reads and writes camelCase JSON keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class BookPayload(CamelModel):
    """Request body for creating or replacing a book.

    Every field is optional at the schema level. The store decides what is
    required so that a missing name is reported with its own message rather
    than as a generic schema error.
    """
    name: Optional[str] = Field(None, description="Book title")
    year: Optional[int] = Field(None, description="Publication year")
    author: Optional[str] = Field(None, description="Book author")
    summary: Optional[str] = Field(None, description="Short summary")
    publisher: Optional[str] = Field(None, description="Publisher name")
    page_count: Optional[int] = Field(None, description="Total number of pages")
    read_page: Optional[int] = Field(None, description="Last page read")
    reading: Optional[bool] = Field(None, description="Whether the book is being read")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "Moby Dick",
                "year": 1851,
                "author": "Herman Melville",
                "summary": "The voyage of the Pequod.",
                "publisher": "Harper & Brothers",
                "pageCount": 635,
                "readPage": 120,
                "reading": True,
            }
        }
    )


class Book(CamelModel):
    """A stored book record."""
    id: str = Field(..., description="Unique book identifier")
    name: str = Field(..., description="Book title")
    year: Optional[int] = Field(None, description="Publication year")
    author: Optional[str] = Field(None, description="Book author")
    summary: Optional[str] = Field(None, description="Short summary")
    publisher: Optional[str] = Field(None, description="Publisher name")
    page_count: Optional[int] = Field(None, description="Total number of pages")
    read_page: Optional[int] = Field(None, description="Last page read")
    reading: Optional[bool] = Field(None, description="Whether the book is being read")
    finished: bool = Field(..., description="True when readPage equals pageCount")
    inserted_at: str = Field(..., description="Creation timestamp")
    updated_at: str = Field(..., description="Last update timestamp")


class BookSummary(CamelModel):
    """Projection of a book returned by the list endpoint."""
    id: str = Field(..., description="Unique book identifier")
    name: str = Field(..., description="Book title")
    publisher: Optional[str] = Field(None, description="Publisher name")


class BookCreatedData(CamelModel):
    book_id: str = Field(..., description="Identifier of the created book")


class BookListData(BaseModel):
    books: List[BookSummary] = Field(..., description="List of books")


class BookData(BaseModel):
    book: Book = Field(..., description="The requested book")


class SuccessResponse(BaseModel):
    """Envelope for successful responses."""
    status: str = Field("success", description="Always 'success'")
    message: Optional[str] = Field(None, description="Human-readable outcome")


class BookCreatedResponse(SuccessResponse):
    data: BookCreatedData


class BookListResponse(SuccessResponse):
    data: BookListData


class BookResponse(SuccessResponse):
    data: BookData


class ErrorResponse(BaseModel):
    """Error response model."""
    status: str = Field(..., description="'fail' for client errors, 'error' for server errors")
    message: str = Field(..., description="Error message")
    detail: Optional[str] = Field(None, description="Additional error details")


class HealthResponse(BaseModel):
    """Health check response model."""
    status: str = Field(..., description="Service status")
    timestamp: str = Field(..., description="Current timestamp")
    version: str = Field(..., description="API version")
    total_books: int = Field(..., description="Number of books currently stored")
