"""
Type aliases for FastAPI dependency injection.

Provides annotated type hints for common infrastructure dependencies,
including the authenticated user and the tenant-scoped backend client.
"""

from typing import Annotated, Optional

from fastapi import Depends, HTTPException, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from infrastructure.clients.backend import BackendClient
from infrastructure.configuration import Settings
from infrastructure.identity import IdentityResolver, User
from infrastructure.logging import bind_user_context, get_module_logger
from infrastructure.operations import OperationStatus
from infrastructure.services.providers import (
    get_backend_client,
    get_identity_resolver,
    get_settings,
)

logger = get_module_logger()
bearer_scheme = HTTPBearer(auto_error=False)

# Settings dependency
SettingsDep = Annotated[Settings, Depends(get_settings)]

# Process-wide backend client (service credentials)
BackendClientDep = Annotated[BackendClient, Depends(get_backend_client)]

# Identity resolver dependency
IdentityResolverDep = Annotated[IdentityResolver, Depends(get_identity_resolver)]


def get_access_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(bearer_scheme),
) -> str:
    """Extract the bearer token or fail with 401."""
    if (
        credentials is None
        or credentials.scheme.lower() != "bearer"
        or not credentials.credentials
    ):
        raise HTTPException(status_code=401, detail="Missing or invalid token")
    return credentials.credentials


AccessTokenDep = Annotated[str, Depends(get_access_token)]


def get_current_user(token: AccessTokenDep, resolver: IdentityResolverDep) -> User:
    """Resolve the acting user. 401 when the backend rejects the token."""
    result = resolver.resolve_user(token)
    if not result.is_success:
        status_code = 401
        if result.status == OperationStatus.TRANSIENT_ERROR:
            status_code = 502
        raise HTTPException(status_code=status_code, detail=result.message)

    user: User = result.data
    bind_user_context(user.id, user.email)
    return user


CurrentUserDep = Annotated[User, Depends(get_current_user)]


def get_tenant_backend(token: AccessTokenDep, backend: BackendClientDep) -> BackendClient:
    """Backend client acting as the end user, so row-level security applies."""
    return backend.with_access_token(token)


TenantBackendDep = Annotated[BackendClient, Depends(get_tenant_backend)]


def require_admin(user: CurrentUserDep, settings: SettingsDep) -> User:
    """Allow only users holding the admin role."""
    if user.role != settings.server.ADMIN_ROLE:
        logger.warning("admin_access_denied", user_id=user.id, role=user.role)
        raise HTTPException(status_code=403, detail="Administrator role required")
    return user


AdminUserDep = Annotated[User, Depends(require_admin)]

__all__ = [
    "SettingsDep",
    "BackendClientDep",
    "IdentityResolverDep",
    "AccessTokenDep",
    "CurrentUserDep",
    "TenantBackendDep",
    "AdminUserDep",
    "get_access_token",
    "get_current_user",
    "get_tenant_backend",
    "require_admin",
]
