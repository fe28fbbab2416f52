from typing import Annotated, Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """
    PhillDesk client configuration using Pydantic BaseSettings.
    Values are loaded automatically from environment variables and `.env`.
    """

    PROJECT_NAME: str = "PhillDesk"
    VERSION: str = "1.0.0"

    # REST backend
    PHILLDESK_API_BASE_URL: str = Field("http://localhost:8080/api", description="Base URL of the PhillDesk API")
    PHILLDESK_API_TOKEN: str | None = Field(None, description="Bearer token sent with every request")
    PHILLDESK_API_TIMEOUT: float = Field(10.0, description="Default request timeout in seconds")
    UPLOAD_TIMEOUT: float = Field(120.0, description="Timeout for prescription uploads in seconds")

    # File upload settings
    MAX_FILE_SIZE: int = Field(10 * 1024 * 1024, description="Maximum upload size in bytes (10MB)")
    ALLOWED_FILE_TYPES: Annotated[list[str], NoDecode] = Field(
        default=["image/jpeg", "image/png", "image/gif", "application/pdf", "image/webp"],
        description="MIME types accepted for prescription uploads",
    )
    ALLOWED_EXTENSIONS: Annotated[list[str], NoDecode] = Field(
        default=[".jpg", ".jpeg", ".png", ".gif", ".webp", ".pdf"],
        description="File extensions accepted for prescription uploads",
    )

    # Pagination
    DEFAULT_PAGE_SIZE: int = Field(10, ge=1, le=100, description="Page size used when fetching prescriptions")

    # Prescription store behaviour
    PRESCRIPTION_COUNT_BY_STATUS: bool = Field(
        False,
        description="Count optimistic inserts under their own status instead of always under 'pending'",
    )
    PRESCRIPTION_DISCARD_STALE_FETCHES: bool = Field(
        False,
        description="Drop prescription list responses superseded by a newer fetch",
    )

    # Logging
    LOG_LEVEL: str = Field("INFO", description="Root log level")
    LOG_FORMAT: str = Field("plain", description="Log format: plain, colored or json")

    model_config = SettingsConfigDict(
        case_sensitive=True,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    def __init__(self, **data: Any):
        super().__init__(**data)

    @field_validator("ALLOWED_FILE_TYPES", mode="before")
    @classmethod
    def parse_allowed_file_types(cls, value):
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        return value

    @field_validator("ALLOWED_EXTENSIONS", mode="before")
    @classmethod
    def parse_allowed_extensions(cls, value):
        if isinstance(value, str):
            value = [ext.strip() for ext in value.split(",") if ext.strip()]
        return [ext.lower() if ext.startswith(".") else f".{ext.lower()}" for ext in value]

    @field_validator("PHILLDESK_API_BASE_URL")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")


# Settings singleton
_settings_instance = None


def get_settings() -> Settings:
    """
    Return a cached Settings instance.
    Avoids re-reading the environment on every call.
    """
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance


def reset_settings() -> None:
    """Drop the cached instance (useful for testing)."""
    global _settings_instance
    _settings_instance = None
