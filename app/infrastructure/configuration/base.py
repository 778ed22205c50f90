"""Base classes shared by the settings sections."""

from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_SETTINGS_CONFIG = SettingsConfigDict(
    env_file=".env",
    case_sensitive=True,
    extra="ignore",
)


class SectionSettings(BaseSettings):
    """One section of the console configuration, read from the environment or `.env`."""

    model_config = ENV_SETTINGS_CONFIG


class IntegrationSettings(SectionSettings):
    """Connection settings for an external service (the managed backend)."""


class FeatureSettings(SectionSettings):
    """Tables, limits and toggles of one feature package."""


class InfrastructureSettings(SectionSettings):
    """HTTP server settings: admin role, CORS origins, rate limits."""
