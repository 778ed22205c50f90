"""Infrastructure configuration module - public API.

This module provides centralized configuration management for the operations
console using Pydantic BaseSettings with domain-based organization.

Exports:
    settings: Singleton Settings instance (main configuration object)
    Settings: Main settings class (for testing/overrides)

Example:
    ```python
    from infrastructure.services import get_settings

    settings = get_settings()

    # Access settings
    backend_url = settings.backend.BACKEND_URL
    audit_table = settings.audit.AUDIT_TABLE

    # Check environment
    if settings.is_production:
        # Production-specific logic...
    ```
"""

from infrastructure.configuration.settings import Settings, settings

__all__ = ["Settings", "settings"]
