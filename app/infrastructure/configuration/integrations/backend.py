"""Backend-as-a-service integration settings."""

from pydantic import Field, field_validator

from infrastructure.configuration.base import IntegrationSettings


class BackendSettings(IntegrationSettings):
    """Managed backend (database, auth, storage, functions) configuration.

    Environment Variables:
        BACKEND_URL: Project base URL (e.g. https://xyz.supabase.co)
        BACKEND_ANON_KEY: Public API key sent as ``apikey`` on every call
        BACKEND_SERVICE_ROLE_KEY: Privileged key for server-side jobs
        BACKEND_TIMEOUT_SECONDS: Per-request timeout (default: 30)
        BACKEND_STORAGE_BUCKET: Bucket used for uploaded images

    Example:
        ```python
        from infrastructure.services import get_settings

        settings = get_settings()
        url = settings.backend.BACKEND_URL
        ```
    """

    BACKEND_URL: str = Field(default="http://127.0.0.1:54321", alias="BACKEND_URL")
    BACKEND_ANON_KEY: str | None = Field(default=None, alias="BACKEND_ANON_KEY")
    BACKEND_SERVICE_ROLE_KEY: str | None = Field(
        default=None, alias="BACKEND_SERVICE_ROLE_KEY"
    )
    BACKEND_TIMEOUT_SECONDS: int = Field(default=30, alias="BACKEND_TIMEOUT_SECONDS")
    BACKEND_STORAGE_BUCKET: str = Field(
        default="blog-images", alias="BACKEND_STORAGE_BUCKET"
    )

    @field_validator("BACKEND_URL")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize the base URL so paths can be appended safely."""
        return v.rstrip("/")
