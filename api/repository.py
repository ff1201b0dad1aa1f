"""
Book repository: the storage capability the HTTP layer depends on,
and its MongoDB implementation.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional

import structlog
from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorCollection, AsyncIOMotorDatabase
from pydantic import ValidationError
from pymongo import ReturnDocument

from api.models import BookCreate, BookResponse, BookUpdate

logger = structlog.get_logger(__name__)


class InvalidBookIdError(ValueError):
    """Raised when an identifier is not in a format the backend accepts."""

    def __init__(self, book_id: str):
        super().__init__(f"Invalid book ID '{book_id}'")
        self.book_id = book_id


class BookRepository(ABC):
    """
    Abstract repository for book persistence operations.

    Identifiers are assigned by the backend in ``add`` and never change.
    ``update`` and ``delete`` raise ``InvalidBookIdError`` for identifiers the
    backend cannot represent, before touching storage.
    """

    @abstractmethod
    def is_valid_id(self, book_id: str) -> bool:
        """Whether ``book_id`` is in a format the backend accepts."""

    @abstractmethod
    async def add(self, book: BookCreate) -> BookResponse:
        """
        Store a new book.

        Args:
            book: Validated book payload

        Returns:
            Stored book with its assigned identifier
        """

    @abstractmethod
    async def list(self) -> List[BookResponse]:
        """Return every stored book."""

    @abstractmethod
    async def update(self, book_id: str, changes: BookUpdate) -> Optional[BookResponse]:
        """
        Apply the supplied fields to a stored book.

        Args:
            book_id: Book identifier
            changes: Fields to overwrite; unset fields are left untouched

        Returns:
            The book as it is after the update, None if it does not exist
        """

    @abstractmethod
    async def delete(self, book_id: str) -> bool:
        """
        Remove a book.

        Returns:
            True if the book existed and was removed, False otherwise
        """

    async def health_check(self) -> Dict:
        """Report backend status."""
        return {"status": "healthy"}

    def _check_id(self, book_id: str) -> None:
        if not self.is_valid_id(book_id):
            raise InvalidBookIdError(book_id)


class MongoBookRepository(BookRepository):
    """MongoDB implementation of BookRepository on top of motor."""

    COLLECTION_NAME = "books"

    def __init__(self, database: AsyncIOMotorDatabase, collection_name: str = COLLECTION_NAME):
        self.database = database
        self.collection: AsyncIOMotorCollection = database[collection_name]

    @staticmethod
    def _to_response(doc: dict) -> BookResponse:
        """Convert a MongoDB document to the API model."""
        return BookResponse(
            id=str(doc["_id"]),
            bookname=doc.get("bookname"),
            author=doc.get("author"),
            quantity=doc.get("quantity"),
            price=doc.get("price"),
            # Records written by older clients carry the timestamp as "date"
            created_at=doc.get("created_at") or doc.get("date"),
        )

    def is_valid_id(self, book_id: str) -> bool:
        return ObjectId.is_valid(book_id)

    async def add(self, book: BookCreate) -> BookResponse:
        doc = book.model_dump()
        try:
            result = await self.collection.insert_one(doc)
        except Exception as e:
            logger.error("Failed to insert book", error=str(e), bookname=book.bookname)
            raise

        doc["_id"] = result.inserted_id
        logger.info("Book added", book_id=str(result.inserted_id), bookname=book.bookname)
        return self._to_response(doc)

    async def list(self) -> List[BookResponse]:
        try:
            docs = await self.collection.find({}).to_list(length=None)
        except Exception as e:
            logger.error("Failed to list books", error=str(e))
            raise

        books = []
        for doc in docs:
            try:
                books.append(self._to_response(doc))
            except ValidationError as e:
                # Documents written outside this API may not match the schema
                logger.warning("Skipping malformed book document", book_id=str(doc.get("_id")), error=str(e))
        return books

    async def update(self, book_id: str, changes: BookUpdate) -> Optional[BookResponse]:
        self._check_id(book_id)
        object_id = ObjectId(book_id)
        fields = changes.changes()

        try:
            if fields:
                doc = await self.collection.find_one_and_update(
                    {"_id": object_id},
                    {"$set": fields},
                    return_document=ReturnDocument.AFTER,
                )
            else:
                doc = await self.collection.find_one({"_id": object_id})
        except Exception as e:
            logger.error("Failed to update book", book_id=book_id, error=str(e))
            raise

        if doc is None:
            return None

        logger.info("Book updated", book_id=book_id, fields=sorted(fields))
        return self._to_response(doc)

    async def delete(self, book_id: str) -> bool:
        self._check_id(book_id)

        try:
            doc = await self.collection.find_one_and_delete({"_id": ObjectId(book_id)})
        except Exception as e:
            logger.error("Failed to delete book", book_id=book_id, error=str(e))
            raise

        if doc is None:
            return False

        logger.info("Book deleted", book_id=book_id)
        return True

    async def health_check(self) -> Dict:
        """
        Perform database health check.

        Returns:
            Dictionary with health status
        """
        try:
            await self.database.command("ping")
            books_count = await self.collection.count_documents({})
            return {
                "status": "healthy",
                "books_collection": "accessible",
                "books_count": books_count
            }
        except Exception as e:
            logger.error("Database health check failed", error=str(e))
            return {
                "status": "unhealthy",
                "error": str(e)
            }
