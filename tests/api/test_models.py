"""
Unit tests for the API models.
Tests camelCase aliasing, coercion and validation errors.
"""

import pytest
from pydantic import ValidationError

from api.config import APIConfig
from api.models import Book, BookCreatedResponse, BookCreatedData, BookPayload


class TestBookPayload:
    """Test cases for BookPayload model."""

    def test_camel_case_input(self, sample_book_json):
        """Test that wire names populate snake_case attributes."""
        payload = BookPayload(**sample_book_json)

        assert payload.page_count == 635
        assert payload.read_page == 120
        assert payload.reading is True

    def test_snake_case_input(self):
        """Test that attribute names are accepted too."""
        payload = BookPayload(name="Dune", page_count=412, read_page=3)
        assert payload.page_count == 412

    def test_all_fields_optional(self):
        """Test that an empty payload is valid at the schema level."""
        payload = BookPayload()
        assert payload.name is None
        assert payload.page_count is None

    def test_numeric_string_coerced(self):
        """Test lax coercion of numeric strings."""
        payload = BookPayload(name="Dune", year="1965")
        assert payload.year == 1965

    def test_invalid_page_count(self):
        """Test that a non-numeric page count is rejected."""
        with pytest.raises(ValidationError):
            BookPayload(name="Dune", pageCount="many")


class TestBook:
    """Test cases for Book model."""

    def test_serializes_with_aliases(self):
        """Test that dumping by alias produces the wire format."""
        book = Book(
            id="abc",
            name="Dune",
            page_count=412,
            read_page=412,
            finished=True,
            inserted_at="2024-01-01T00:00:00.000Z",
            updated_at="2024-01-01T00:00:00.000Z",
        )

        data = book.model_dump(by_alias=True)

        assert data["pageCount"] == 412
        assert data["readPage"] == 412
        assert data["insertedAt"] == "2024-01-01T00:00:00.000Z"
        assert data["publisher"] is None
        assert "page_count" not in data

    def test_name_required(self):
        """Test that a stored book always has a name."""
        with pytest.raises(ValidationError):
            Book(id="abc", finished=False, inserted_at="t", updated_at="t")


def test_created_response_uses_book_id_alias():
    """Test the envelope returned when a book is added."""
    response = BookCreatedResponse(message="ok", data=BookCreatedData(book_id="abc"))
    assert response.model_dump(by_alias=True) == {
        "status": "success",
        "message": "ok",
        "data": {"bookId": "abc"},
    }


class TestAPIConfig:
    """Test cases for APIConfig."""

    def test_defaults(self):
        config = APIConfig()
        assert config.port == 8000
        assert config.log_format in ("json", "console")

    def test_log_level_normalized(self):
        assert APIConfig(log_level="debug").log_level == "DEBUG"

    def test_invalid_log_level(self):
        with pytest.raises(ValidationError):
            APIConfig(log_level="LOUD")

    def test_invalid_log_format(self):
        with pytest.raises(ValidationError):
            APIConfig(log_format="xml")

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("PORT", "9001")
        monkeypatch.setenv("DEBUG", "true")
        config = APIConfig()
        assert config.port == 9001
        assert config.debug is True
