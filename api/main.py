"""
FastAPI application for the Bookstore Inventory API.
"""

from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from motor.motor_asyncio import AsyncIOMotorClient
from starlette.exceptions import HTTPException

from api.config import APIConfig, config as api_config
from api.models import ErrorResponse
from api.repository import BookRepository, MongoBookRepository
from api.routes import router
from api.uploads import UploadStorage

logger = structlog.get_logger(__name__)


def _format_validation_errors(exc: RequestValidationError) -> str:
    """Flatten framework validation errors into one message."""
    messages = []
    for err in exc.errors():
        location = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
        messages.append(f"{location}: {err.get('msg')}" if location else err.get("msg"))
    return "; ".join(messages) or "Invalid request"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    logger.info("Starting Bookstore API")
    settings: APIConfig = app.state.settings

    # Injected repositories are owned by the caller
    client = None
    if app.state.repository is None:
        client = AsyncIOMotorClient(settings.mongodb_uri)
        database = client[settings.get_database_name()]
        app.state.repository = MongoBookRepository(database, settings.books_collection)

        try:
            await database.command("ping")
            logger.info("Database connection established", database=settings.get_database_name())
        except Exception as e:
            logger.error("MongoDB connection error", error=str(e))

    yield

    logger.info("Shutting down Bookstore API")
    if client is not None:
        client.close()


def create_app(
    repository: Optional[BookRepository] = None,
    upload_storage: Optional[UploadStorage] = None,
    settings: APIConfig = api_config
) -> FastAPI:
    """
    Build the application.

    Args:
        repository: Book storage; a MongoDB repository is created at startup when omitted
        upload_storage: Upload destination; defaults to ``settings.upload_dir``
        settings: Configuration to use

    Returns:
        Configured FastAPI application
    """
    app = FastAPI(
        title=settings.api_title,
        description=settings.api_description,
        version=settings.api_version,
        lifespan=lifespan
    )

    app.state.settings = settings
    app.state.repository = repository
    app.state.upload_storage = upload_storage or UploadStorage(settings.get_upload_path())

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request, exc: HTTPException):
        """Handle HTTP exceptions."""
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(
                error=str(exc.detail),
                status_code=exc.status_code
            ).model_dump(),
            headers=exc.headers
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request, exc: RequestValidationError):
        """Report invalid request bodies and parameters as 400."""
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=ErrorResponse(
                error=_format_validation_errors(exc),
                status_code=status.HTTP_400_BAD_REQUEST
            ).model_dump()
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request, exc: Exception):
        """Handle general exceptions."""
        logger.error("Unhandled exception", error=str(exc), path=request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=ErrorResponse(
                error="Internal server error",
                detail=str(exc) if settings.debug else None,
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR
            ).model_dump()
        )

    app.include_router(router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "api.main:app",
        host=api_config.host,
        port=api_config.port,
        reload=True,
        log_level="info"
    )
