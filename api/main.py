"""
FastAPI main application for the Bookshelf API.

``create_app`` builds an application around a ``BookStore``. The store is
kept on ``app.state`` and handed to route handlers through the
``get_book_store`` dependency, so each app owns exactly one collection.
"""

from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import APIRouter, Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.config import APIConfig, config as default_config
from api.errors import BookshelfError
from api.models import (
    BookCreatedData, BookCreatedResponse, BookData, BookListData,
    BookListResponse, BookPayload, BookResponse,
    ErrorResponse, HealthResponse, SuccessResponse
)
from api.store import BookStore, utc_timestamp
from utilities.logger import setup_logging

# Setup logging
logger = structlog.get_logger(__name__)

router = APIRouter()


def get_book_store(request: Request) -> BookStore:
    """Dependency returning the store owned by the running application."""
    return request.app.state.book_store


def get_config(request: Request) -> APIConfig:
    """Dependency returning the configuration the application was built with."""
    return request.app.state.config


def parse_flag(value: Optional[str]) -> Optional[bool]:
    """
    Interpret a ``0``/``1`` query flag.

    An absent or empty flag means "do not filter". Any present value other
    than ``"1"`` counts as false.
    """
    if not value:
        return None
    return value == "1"


def render(model: BaseModel, status_code: int = status.HTTP_200_OK) -> JSONResponse:
    """Serialize a response envelope with camelCase keys, leaving out an empty message."""
    content = model.model_dump(by_alias=True)
    if content.get("message") is None:
        content.pop("message", None)
    return JSONResponse(status_code=status_code, content=content)


def error_response(status_code: int, status_word: str, message: str,
                   detail: Optional[str] = None, headers: Optional[dict] = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(
            status=status_word,
            message=message,
            detail=detail
        ).model_dump(exclude_none=True),
        headers=headers
    )


# Health check endpoint
@router.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check(
    store: BookStore = Depends(get_book_store),
    settings: APIConfig = Depends(get_config)
):
    """Health check endpoint."""
    return HealthResponse(
        status="healthy",
        timestamp=utc_timestamp(),
        version=settings.api_version,
        total_books=store.count()
    )


# Books endpoints
@router.post(
    "/books",
    response_model=BookCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    tags=["Books"]
)
async def add_book(payload: BookPayload, store: BookStore = Depends(get_book_store)):
    """
    Add a new book.

    - **name** is required
    - **readPage** may not be greater than **pageCount**
    """
    book_id = store.add_book(payload)
    return render(
        BookCreatedResponse(
            message="Book added successfully",
            data=BookCreatedData(book_id=book_id)
        ),
        status_code=status.HTTP_201_CREATED
    )


@router.get("/books", response_model=BookListResponse, tags=["Books"])
async def get_books(
    name: Optional[str] = None,
    reading: Optional[str] = None,
    finished: Optional[str] = None,
    store: BookStore = Depends(get_book_store)
):
    """
    List books as id, name and publisher.

    Only one filter is applied, checked in this order:

    - **name**: Case-insensitive substring of the book name
    - **reading**: 1 for books being read, 0 for the rest
    - **finished**: 1 for finished books, 0 for the rest
    """
    books = store.list_books(
        name=name,
        reading=parse_flag(reading),
        finished=parse_flag(finished)
    )
    return render(BookListResponse(data=BookListData(books=books)))


@router.get(
    "/books/{book_id}",
    response_model=BookResponse,
    responses={404: {"model": ErrorResponse}},
    tags=["Books"]
)
async def get_book(book_id: str, store: BookStore = Depends(get_book_store)):
    """
    Get a single book by ID.

    - **book_id**: Book identifier returned when the book was added
    """
    book = store.get_book(book_id)
    return render(BookResponse(data=BookData(book=book)))


@router.put(
    "/books/{book_id}",
    response_model=SuccessResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    tags=["Books"]
)
async def update_book(
    book_id: str,
    payload: BookPayload,
    store: BookStore = Depends(get_book_store)
):
    """
    Replace every field of a book.

    Fields left out of the payload are cleared.
    """
    store.update_book(book_id, payload)
    return render(SuccessResponse(message="Book updated successfully"))


@router.delete(
    "/books/{book_id}",
    response_model=SuccessResponse,
    responses={404: {"model": ErrorResponse}},
    tags=["Books"]
)
async def delete_book(book_id: str, store: BookStore = Depends(get_book_store)):
    """Delete a book by ID."""
    store.delete_book(book_id)
    return render(SuccessResponse(message="Book deleted successfully"))


def register_exception_handlers(app: FastAPI) -> None:
    """Render every error with the ``{status, message}`` envelope."""

    @app.exception_handler(BookshelfError)
    async def bookshelf_exception_handler(request: Request, exc: BookshelfError):
        """Handle errors raised by the book store."""
        return error_response(exc.status_code, exc.status, exc.message)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Handle malformed payloads and wrongly typed fields."""
        logger.info("Invalid request payload", path=request.url.path, errors=str(exc.errors()))
        return error_response(
            status.HTTP_400_BAD_REQUEST,
            "fail",
            "Invalid request payload",
            detail=str(exc.errors()) if request.app.state.config.debug else None
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """Handle HTTP exceptions."""
        status_word = "error" if exc.status_code >= 500 else "fail"
        return error_response(
            exc.status_code,
            status_word,
            str(exc.detail),
            headers=getattr(exc, "headers", None)
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle general exceptions."""
        logger.error("Unhandled exception", error=str(exc), path=request.url.path)
        return error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "error",
            "Internal server error",
            detail=str(exc) if request.app.state.config.debug else None
        )


def create_app(store: Optional[BookStore] = None, settings: Optional[APIConfig] = None) -> FastAPI:
    """
    Build a configured FastAPI application.

    Args:
        store: Book store to serve; a new empty one is created when omitted
        settings: Configuration to use instead of the module-level config

    Returns:
        The application, with the store available as ``app.state.book_store``
    """
    settings = settings if settings is not None else default_config

    setup_logging(
        log_level=settings.log_level,
        log_format=settings.log_format,
        log_file=settings.log_file,
        debug=settings.debug
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan manager."""
        logger.info("Starting Bookshelf API", version=settings.api_version)
        yield
        logger.info(
            "Shutting down Bookshelf API",
            total_books=app.state.book_store.count()
        )

    app = FastAPI(
        title=settings.api_title,
        description=settings.api_description,
        version=settings.api_version,
        license_info={
            "name": "MIT",
            "url": "https://opensource.org/licenses/MIT",
        },
        lifespan=lifespan
    )
    app.state.book_store = store if store is not None else BookStore()
    app.state.config = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )

    register_exception_handlers(app)
    app.include_router(router)
    return app


# Create the application instance at import time so uvicorn can find it
app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "api.main:app",
        host=default_config.host,
        port=default_config.port,
        reload=default_config.debug,
        log_level=default_config.log_level.lower()
    )
