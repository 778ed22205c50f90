"""Resolve bearer tokens to console users through the backend auth API."""

from typing import TYPE_CHECKING

import structlog

from infrastructure.identity.models import User
from infrastructure.operations import OperationResult, OperationStatus

if TYPE_CHECKING:
    from infrastructure.clients.backend import BackendClient

logger = structlog.get_logger()


class IdentityResolver:
    """Turn an access token into a User.

    Args:
        backend: Process-wide backend client
    """

    def __init__(self, backend: "BackendClient") -> None:
        self._backend = backend
        self._logger = logger.bind(component="identity_resolver")

    def resolve_user(self, access_token: str) -> OperationResult:
        """Resolve the user behind ``access_token``.

        Returns:
            OperationResult with a User, or UNAUTHORIZED when the token is
            missing, expired or rejected.
        """
        if not access_token:
            return OperationResult.unauthorized("Missing access token")

        result = self._backend.get_user(access_token)
        if result.status in (OperationStatus.UNAUTHORIZED, OperationStatus.NOT_FOUND):
            self._logger.info("token_rejected", error=result.message)
            return OperationResult.unauthorized("Invalid or expired access token")
        if not result.is_success:
            return result

        payload = result.data
        if not isinstance(payload, dict) or not payload.get("id"):
            self._logger.warning("auth_payload_without_id")
            return OperationResult.unauthorized("Invalid or expired access token")

        user = User.from_auth_payload(payload)
        self._logger.debug("user_resolved", user_id=user.id, role=user.role)
        return OperationResult.success(data=user)
