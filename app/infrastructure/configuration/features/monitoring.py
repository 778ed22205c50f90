"""Monitoring feature settings."""

from pydantic import Field

from infrastructure.configuration.base import FeatureSettings


class MonitoringFeatureSettings(FeatureSettings):
    """Uptime and business monitoring configuration.

    Environment Variables:
        STATUS_PAGE_BASE_URL: Public base URL under which status pages are served
        MONITOR_DEFAULT_TIMEOUT_SECONDS: Default timeout for new monitors
        MONITOR_DEFAULT_INTERVAL_MINUTES: Default check interval for new monitors
        NOTIFICATION_FUNCTION: Remote function delivering email and SMS alerts
    """

    STATUS_PAGE_BASE_URL: str = Field(
        default="https://topreparateurs.fr/status", alias="STATUS_PAGE_BASE_URL"
    )
    MONITOR_DEFAULT_TIMEOUT_SECONDS: int = Field(
        default=30, alias="MONITOR_DEFAULT_TIMEOUT_SECONDS"
    )
    MONITOR_DEFAULT_INTERVAL_MINUTES: int = Field(
        default=5, alias="MONITOR_DEFAULT_INTERVAL_MINUTES"
    )
    NOTIFICATION_FUNCTION: str = Field(
        default="send-notification", alias="NOTIFICATION_FUNCTION"
    )
