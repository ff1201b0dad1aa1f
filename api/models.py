"""
API models and schemas for the bookstore API.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


class BookCreate(BaseModel):
    """Payload for adding a book to the inventory."""
    model_config = ConfigDict(populate_by_name=True)

    bookname: str = Field(..., min_length=1, description="Book title")
    author: str = Field(..., min_length=1, description="Book author")
    quantity: int = Field(..., description="Units in stock")
    price: float = Field(..., description="Unit price")
    created_at: datetime = Field(
        default_factory=utcnow,
        alias="createdAt",
        description="Creation timestamp"
    )


class BookUpdate(BaseModel):
    """
    Payload for updating a book.

    Every field is optional; only the fields present in the request
    are written.
    """
    bookname: Optional[str] = Field(None, min_length=1, description="Book title")
    author: Optional[str] = Field(None, min_length=1, description="Book author")
    quantity: Optional[int] = Field(None, description="Units in stock")
    price: Optional[float] = Field(None, description="Unit price")

    def changes(self) -> dict:
        """Fields explicitly supplied with a non-null value."""
        return self.model_dump(exclude_unset=True, exclude_none=True)


class BookResponse(BaseModel):
    """Book response model for API."""
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., description="Unique book identifier")
    bookname: str = Field(..., description="Book title")
    author: str = Field(..., description="Book author")
    quantity: int = Field(..., description="Units in stock")
    price: float = Field(..., description="Unit price")
    created_at: Optional[datetime] = Field(
        None,
        alias="createdAt",
        description="Creation timestamp"
    )


class UploadedFile(BaseModel):
    """Metadata describing a stored upload."""
    fieldname: str = Field(..., description="Form field the file was sent in")
    originalname: str = Field(..., description="Client-side file name")
    encoding: str = Field("7bit", description="Transfer encoding")
    mimetype: Optional[str] = Field(None, description="Content type sent by the client")
    destination: str = Field(..., description="Directory the file was written to")
    filename: str = Field(..., description="Stored file name")
    path: str = Field(..., description="Stored file path")
    size: int = Field(..., ge=0, description="Size in bytes")


class UploadResponse(BaseModel):
    """Response model for a successful upload."""
    message: str = Field(..., description="Result message")
    file: UploadedFile = Field(..., description="Stored file metadata")


class MessageResponse(BaseModel):
    """Plain message response model."""
    message: str = Field(..., description="Result message")


class ErrorResponse(BaseModel):
    """Error response model."""
    error: str = Field(..., description="Error message")
    detail: Optional[str] = Field(None, description="Additional error details")
    status_code: int = Field(..., description="HTTP status code")


class HealthResponse(BaseModel):
    """Health check response model."""
    status: str = Field(..., description="Service status")
    timestamp: datetime = Field(..., description="Current timestamp")
    version: str = Field(..., description="API version")
    database_status: str = Field(..., description="Database connection status")
