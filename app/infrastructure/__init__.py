"""Infrastructure shared by the console's feature packages.

- configuration: settings aggregated from the environment
- clients: the managed backend client
- identity: users resolved from access tokens
- operations: OperationResult and failure classification
- resilience: circuit breakers
- audit: the audit trail recorder
- notifications: alert delivery channels
- logging: structlog setup and request context
- services: FastAPI dependency providers
"""

from infrastructure.configuration import settings
from infrastructure.identity import User
from infrastructure.operations import OperationResult, OperationStatus
from infrastructure.services import (
    SettingsDep,
    IdentityResolverDep,
    get_settings,
    get_identity_resolver,
)

__all__ = [
    "settings",
    "User",
    "OperationResult",
    "OperationStatus",
    "SettingsDep",
    "IdentityResolverDep",
    "get_settings",
    "get_identity_resolver",
]
