"""Configuration management for userlist."""

import logging

from pydantic import Field, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from userlist.core.constants import API_URL, APIConstants, PaginationConstants
from userlist.exceptions import ConfigurationError


class Config(BaseSettings):
    """Application configuration."""

    api_url: str = Field(default=API_URL, alias="USERLIST_API_URL", description="Users endpoint URL")
    page_size: int = Field(
        default=int(PaginationConstants.ITEMS_PER_PAGE),
        gt=0,
        alias="USERLIST_PAGE_SIZE",
        description="Number of users shown per page",
    )
    request_timeout: float = Field(
        default=float(APIConstants.REQUEST_TIMEOUT),
        gt=0,
        alias="USERLIST_REQUEST_TIMEOUT",
        description="HTTP request timeout in seconds",
    )

    # Fetch cache behaviour
    retry_on_error: bool = Field(
        default=False,
        alias="USERLIST_RETRY_ON_ERROR",
        description="Retry failed transport calls with exponential backoff",
    )
    revalidate_on_mount: bool = Field(
        default=True,
        alias="USERLIST_REVALIDATE_ON_MOUNT",
        description="Fetch as soon as a key gets its first subscriber",
    )

    log_level: str = Field(default="WARNING", alias="USERLIST_LOG_LEVEL", description="Root log level")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {value}")
        return level

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        populate_by_name=True,
    )


def load_config() -> Config:
    """Load configuration from environment and .env file.

    Raises:
        ConfigurationError: If a setting has an invalid value
    """
    try:
        return Config()
    except PydanticValidationError as e:
        fields = sorted({str(error["loc"][0]) for error in e.errors() if error["loc"]})
        raise ConfigurationError(f"Invalid configuration: {', '.join(fields)}", {"errors": e.errors()}) from e
