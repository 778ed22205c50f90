"""Operations console configuration settings - main aggregator."""

from pydantic_settings import BaseSettings, SettingsConfigDict

# Integration settings
from infrastructure.configuration.integrations import BackendSettings

# Feature settings
from infrastructure.configuration.features import (
    AuditFeatureSettings,
    MonitoringFeatureSettings,
    BlogFeatureSettings,
    StorefrontFeatureSettings,
    ImportsFeatureSettings,
)

# Infrastructure settings
from infrastructure.configuration.infrastructure import ServerSettings


class Settings(BaseSettings):
    """Operations console configuration settings - main aggregator.

    Aggregates all domain-specific settings into a single configuration object.
    Settings are organized by concern:

    - **Integrations**: The managed backend (tables, auth, storage, functions)
    - **Features**: Feature packages (audit, monitoring, blog, storefront, imports)
    - **Infrastructure**: Core system configuration (server)

    Environment Variables:
        PREFIX: Environment prefix for non-production deployments
        LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR)
        GIT_SHA: Git commit SHA for deployment tracking

    Example:
        ```python
        from infrastructure.services import get_settings

        settings = get_settings()
        backend_url = settings.backend.BACKEND_URL

        if settings.is_production:
            # Production-specific logic...
        ```
    """

    # Application-level settings
    PREFIX: str = ""
    LOG_LEVEL: str = "INFO"
    GIT_SHA: str = "Unknown"

    # Integration settings
    backend: BackendSettings

    # Feature settings
    audit: AuditFeatureSettings
    monitoring: MonitoringFeatureSettings
    blog: BlogFeatureSettings
    storefront: StorefrontFeatureSettings
    imports: ImportsFeatureSettings

    # Infrastructure settings
    server: ServerSettings

    @property
    def is_production(self) -> bool:
        """Check if the application is running in production.

        Returns:
            True if PREFIX is empty (production), False otherwise.
        """
        return not bool(self.PREFIX)

    def __init__(self, **kwargs):
        """Initialize Settings with automatic subsettings instantiation.

        Args:
            **kwargs: Optional overrides for specific settings sections.
        """
        settings_map = {
            # Integrations
            "backend": BackendSettings,
            # Features
            "audit": AuditFeatureSettings,
            "monitoring": MonitoringFeatureSettings,
            "blog": BlogFeatureSettings,
            "storefront": StorefrontFeatureSettings,
            "imports": ImportsFeatureSettings,
            # Infrastructure
            "server": ServerSettings,
        }

        for setting_name, setting_class in settings_map.items():
            if setting_name not in kwargs:
                kwargs[setting_name] = setting_class()

        super().__init__(**kwargs)

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )


# Singleton instance
settings = Settings()
