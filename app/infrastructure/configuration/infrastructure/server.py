"""Server infrastructure settings."""

from typing import Annotated, List

from pydantic import Field, field_validator
from pydantic_settings import NoDecode

from infrastructure.configuration.base import InfrastructureSettings


class ServerSettings(InfrastructureSettings):
    """HTTP server runtime configuration.

    Environment Variables:
        CONSOLE_URL: Public URL of the console front-end
        CORS_ALLOWED_ORIGINS: Comma-separated origins allowed outside production
        ADMIN_ROLE: Role name granting access to the audit review routes

    Example:
        ```python
        from infrastructure.services import get_settings

        origins = get_settings().server.CORS_ALLOWED_ORIGINS
        ```
    """

    CONSOLE_URL: str = Field(default="http://127.0.0.1:8000", alias="CONSOLE_URL")
    CORS_ALLOWED_ORIGINS: Annotated[List[str], NoDecode] = Field(
        default_factory=lambda: [
            "http://localhost:8000",
            "http://127.0.0.1:8000",
            "http://localhost:5173",
        ],
        alias="CORS_ALLOWED_ORIGINS",
    )
    ADMIN_ROLE: str = Field(default="admin", alias="ADMIN_ROLE")

    @field_validator("CORS_ALLOWED_ORIGINS", mode="before")
    @classmethod
    def split_origins(cls, v):
        """Accept a comma-separated string as well as a list."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v
