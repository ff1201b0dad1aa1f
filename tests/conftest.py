"""
Pytest configuration and shared fixtures.
"""

from typing import Dict, List, Optional
from unittest.mock import AsyncMock

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient

from api.config import APIConfig
from api.main import create_app
from api.models import BookCreate, BookResponse, BookUpdate
from api.repository import BookRepository
from api.uploads import UploadStorage


class InMemoryBookRepository(BookRepository):
    """Book repository keeping records in a dict, with ObjectId identifiers."""

    def __init__(self):
        self.books: Dict[str, BookResponse] = {}
        self.queried_ids: List[str] = []

    def is_valid_id(self, book_id: str) -> bool:
        return ObjectId.is_valid(book_id)

    async def add(self, book: BookCreate) -> BookResponse:
        stored = BookResponse(id=str(ObjectId()), **book.model_dump())
        self.books[stored.id] = stored
        return stored

    async def list(self) -> List[BookResponse]:
        return list(self.books.values())

    async def update(self, book_id: str, changes: BookUpdate) -> Optional[BookResponse]:
        self._check_id(book_id)
        self.queried_ids.append(book_id)
        current = self.books.get(book_id)
        if current is None:
            return None
        updated = current.model_copy(update=changes.changes())
        self.books[book_id] = updated
        return updated

    async def delete(self, book_id: str) -> bool:
        self._check_id(book_id)
        self.queried_ids.append(book_id)
        return self.books.pop(book_id, None) is not None


@pytest.fixture
def settings(tmp_path):
    """Configuration pointing uploads at a temporary directory."""
    return APIConfig(upload_dir=str(tmp_path / "uploads"), debug=False)


@pytest.fixture
def upload_storage(settings):
    return UploadStorage(settings.get_upload_path())


@pytest.fixture
def book_repository():
    """In-memory repository."""
    return InMemoryBookRepository()


@pytest.fixture
def mock_book_repository():
    """Create a mock repository for failure paths."""
    repository = AsyncMock(spec=BookRepository)
    repository.is_valid_id.side_effect = ObjectId.is_valid
    repository.health_check.return_value = {"status": "healthy"}
    return repository


@pytest.fixture
def client(book_repository, upload_storage, settings):
    """Test client backed by the in-memory repository."""
    app = create_app(repository=book_repository, upload_storage=upload_storage, settings=settings)
    return TestClient(app)


@pytest.fixture
def mock_client(mock_book_repository, upload_storage, settings):
    """Test client backed by the mock repository."""
    app = create_app(repository=mock_book_repository, upload_storage=upload_storage, settings=settings)
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture
def sample_book_payload():
    """Sample request body for adding a book."""
    return {
        "bookname": "Dune",
        "author": "Herbert",
        "quantity": 5,
        "price": 9.99
    }
