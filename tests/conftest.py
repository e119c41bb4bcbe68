"""
Pytest configuration and shared fixtures.
"""

import pytest
from fastapi.testclient import TestClient

from api.main import create_app
from api.models import BookPayload
from api.store import BookStore


@pytest.fixture
def book_store():
    """Create an empty book store for each test."""
    return BookStore()


@pytest.fixture
def client(book_store):
    """Create a test client for an app serving ``book_store``."""
    return TestClient(create_app(store=book_store))


@pytest.fixture
def sample_book_json():
    """Sample request body for a book that is still being read."""
    return {
        "name": "Moby Dick",
        "year": 1851,
        "author": "Herman Melville",
        "summary": "The voyage of the whaling ship Pequod.",
        "publisher": "Harper & Brothers",
        "pageCount": 635,
        "readPage": 120,
        "reading": True
    }


@pytest.fixture
def sample_payload(sample_book_json):
    """Sample payload model matching ``sample_book_json``."""
    return BookPayload(**sample_book_json)


@pytest.fixture
def make_payload(sample_book_json):
    """Build payloads from the sample with some fields overridden."""
    def _make(**overrides):
        data = dict(sample_book_json)
        data.update(overrides)
        return BookPayload(**data)
    return _make
