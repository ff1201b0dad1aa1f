"""
API configuration settings.
"""

from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class APIConfig(BaseSettings):
    """API configuration settings."""

    # API Settings
    api_title: str = "Bookstore Inventory API"
    api_version: str = "1.0.0"
    api_description: str = "Create, list, update and delete books in the store inventory"

    # Server Settings
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=5000)
    debug: bool = Field(default=False)

    # Database Settings
    mongodb_uri: str = Field(default="mongodb://localhost:27017/yourdatabase")
    mongodb_database: str = Field(default="bookstore")
    books_collection: str = Field(default="books")

    # Upload Settings
    upload_dir: str = Field(default="uploads")

    # CORS Settings
    cors_origins: list = ["*"]
    cors_allow_credentials: bool = True
    cors_allow_methods: list = ["*"]
    cors_allow_headers: list = ["*"]

    # Logging
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="json")
    log_file: Optional[str] = Field(default="logs/api.log")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore"  # Ignore extra fields from .env
    }

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v):
        """Ensure log level is valid."""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            raise ValueError(f'log_level must be one of: {valid_levels}')
        return v.upper()

    @field_validator('log_format')
    @classmethod
    def validate_log_format(cls, v):
        """Ensure log format is valid."""
        valid_formats = ['json', 'console']
        if v.lower() not in valid_formats:
            raise ValueError(f'log_format must be one of: {valid_formats}')
        return v.lower()

    def get_database_name(self) -> str:
        """
        Database name to use.

        Taken from the path of the connection URI when it has one
        (``mongodb://host:27017/inventory`` -> ``inventory``), otherwise
        ``mongodb_database``.
        """
        path = urlparse(self.mongodb_uri).path.lstrip("/")
        return path or self.mongodb_database

    def get_upload_path(self) -> Path:
        """Get upload directory as Path object."""
        return Path(self.upload_dir)


# Global config instance
config = APIConfig()
