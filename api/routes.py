"""
HTTP endpoints for the bookstore API.
"""

from datetime import datetime, timezone
from typing import List, Optional

import structlog
from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile, status
from fastapi.responses import PlainTextResponse

from api.models import (
    BookCreate, BookUpdate, BookResponse,
    MessageResponse, UploadResponse, HealthResponse
)
from api.repository import BookRepository, InvalidBookIdError
from api.uploads import UploadStorage

logger = structlog.get_logger(__name__)

router = APIRouter()


def get_repository(request: Request) -> BookRepository:
    """Repository injected into the application at construction."""
    repository = getattr(request.app.state, "repository", None)
    if repository is None:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Database service not available"
        )
    return repository


def get_upload_storage(request: Request) -> UploadStorage:
    return request.app.state.upload_storage


@router.get("/", response_class=PlainTextResponse, tags=["General"])
async def welcome():
    """Welcome message."""
    return "Welcome to the Bookstore API"


@router.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check(request: Request):
    """Health check endpoint."""
    version = request.app.version
    repository = getattr(request.app.state, "repository", None)

    db_status = "unavailable"
    if repository is not None:
        health_info = await repository.health_check()
        db_status = health_info.get("status", "unknown")

    return HealthResponse(
        status="healthy" if db_status == "healthy" else "degraded",
        timestamp=datetime.now(timezone.utc),
        version=version,
        database_status=db_status
    )


@router.post(
    "/addBook",
    response_model=BookResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["Books"]
)
async def add_book(
    book: BookCreate,
    repository: BookRepository = Depends(get_repository)
):
    """
    Add a book to the inventory.

    - **bookname**, **author**: non-empty strings
    - **quantity**: integer, **price**: number
    """
    try:
        return await repository.add(book)
    except Exception as e:
        logger.error("Failed to add book", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to add book: {str(e)}"
        )


@router.get("/books", response_model=List[BookResponse], tags=["Books"])
async def list_books(repository: BookRepository = Depends(get_repository)):
    """List every book in the inventory."""
    try:
        return await repository.list()
    except Exception as e:
        logger.error("Failed to list books", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to retrieve books: {str(e)}"
        )


@router.put("/books/{book_id}", response_model=BookResponse, tags=["Books"])
async def update_book(
    book_id: str,
    changes: Optional[BookUpdate] = None,
    repository: BookRepository = Depends(get_repository)
):
    """
    Update a book.

    - **book_id**: Book identifier (MongoDB ObjectId)

    Only the fields present in the body are changed; a missing body
    leaves the book as it is.
    """
    if not repository.is_valid_id(book_id):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid book ID"
        )

    try:
        book = await repository.update(book_id, changes or BookUpdate())
    except InvalidBookIdError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except Exception as e:
        logger.error("Failed to update book", book_id=book_id, error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to update book: {str(e)}"
        )

    if book is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Book not found"
        )
    return book


@router.delete("/books/{book_id}", response_model=MessageResponse, tags=["Books"])
async def delete_book(
    book_id: str,
    repository: BookRepository = Depends(get_repository)
):
    """
    Delete a book.

    - **book_id**: Book identifier (MongoDB ObjectId)
    """
    try:
        deleted = await repository.delete(book_id)
    except InvalidBookIdError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except Exception as e:
        logger.error("Failed to delete book", book_id=book_id, error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to delete book: {str(e)}"
        )

    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Book not found"
        )
    return MessageResponse(message="Book deleted successfully")


@router.post("/upload", response_model=UploadResponse, tags=["Files"])
async def upload_file(
    file: Optional[UploadFile] = File(None),
    storage: UploadStorage = Depends(get_upload_storage)
):
    """
    Store a single file sent in the multipart field ``file``.

    No type or size restrictions are applied.
    """
    if file is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No file uploaded"
        )

    try:
        stored = await storage.save(file)
    except Exception as e:
        logger.error("File upload failed", originalname=file.filename, error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="File upload failed"
        )
    finally:
        await file.close()

    return UploadResponse(message="File uploaded successfully", file=stored)
