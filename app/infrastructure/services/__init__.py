"""
Dependency injection services.

Provides type aliases and provider functions for FastAPI dependency injection.
"""

from infrastructure.services.dependencies import (
    AccessTokenDep,
    AdminUserDep,
    BackendClientDep,
    CurrentUserDep,
    IdentityResolverDep,
    SettingsDep,
    TenantBackendDep,
    get_access_token,
    get_current_user,
    get_tenant_backend,
    require_admin,
)
from infrastructure.services.providers import (
    get_backend_client,
    get_identity_resolver,
    get_settings,
)

__all__ = [
    "AccessTokenDep",
    "AdminUserDep",
    "BackendClientDep",
    "CurrentUserDep",
    "IdentityResolverDep",
    "SettingsDep",
    "TenantBackendDep",
    "get_access_token",
    "get_current_user",
    "get_tenant_backend",
    "require_admin",
    "get_backend_client",
    "get_identity_resolver",
    "get_settings",
]
