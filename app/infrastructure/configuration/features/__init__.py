"""Feature settings __init__ - exports all feature settings."""

from infrastructure.configuration.features.audit import AuditFeatureSettings
from infrastructure.configuration.features.monitoring import (
    MonitoringFeatureSettings,
)
from infrastructure.configuration.features.blog import BlogFeatureSettings
from infrastructure.configuration.features.storefront import (
    StorefrontFeatureSettings,
)
from infrastructure.configuration.features.imports import ImportsFeatureSettings

__all__ = [
    "AuditFeatureSettings",
    "MonitoringFeatureSettings",
    "BlogFeatureSettings",
    "StorefrontFeatureSettings",
    "ImportsFeatureSettings",
]
