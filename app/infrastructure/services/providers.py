"""
Factory functions for dependency injection.

Provides application-scoped singleton providers for core infrastructure services.
"""

from functools import lru_cache

from infrastructure.clients.backend import BackendClient
from infrastructure.configuration import Settings
from infrastructure.identity import IdentityResolver


@lru_cache
def get_settings() -> Settings:
    """
    Get application-scoped settings singleton.

    The @lru_cache decorator ensures only ONE instance is created per process.

    Application code should use the DI type alias for testability:
        from infrastructure.services import SettingsDep
        @router.get("/config")
        def get_config(settings: SettingsDep):
            ...

    Returns:
        Settings: Cached settings instance loaded from environment.
    """
    return Settings()


@lru_cache
def get_backend_client() -> BackendClient:
    """
    Get the process-wide backend client.

    It owns the pooled HTTP session. Request handlers should not use it for
    tenant data directly; ``TenantBackendDep`` derives a user-scoped client
    from it.
    """
    return BackendClient(get_settings())


@lru_cache
def get_identity_resolver() -> IdentityResolver:
    """Get application-scoped identity resolver singleton."""
    return IdentityResolver(get_backend_client())
