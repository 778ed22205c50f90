"""Email channel delegated to the backend notification function."""

from typing import TYPE_CHECKING

import structlog

from infrastructure.notifications.channels.base import NotificationChannel
from infrastructure.notifications.models import (
    ChannelType,
    NotificationMessage,
    notification_request,
)
from infrastructure.operations import OperationResult

if TYPE_CHECKING:
    from infrastructure.clients.backend import BackendClient

logger = structlog.get_logger()


class EmailChannel(NotificationChannel):
    """Send email through the backend's notification function."""

    def __init__(
        self, email: str, backend: "BackendClient", function_name: str, user_id: str
    ) -> None:
        self._email = email
        self._user_id = user_id
        self._backend = backend
        self._function_name = function_name
        self._logger = logger.bind(component="email_channel")

    @property
    def channel_name(self) -> str:
        return "email"

    @property
    def target(self) -> str:
        return self._email

    def _deliver(self, message: NotificationMessage) -> OperationResult:
        result = self._backend.invoke_function(
            self._function_name,
            notification_request(self._user_id, message, ChannelType.EMAIL, self._email),
        )
        if result.is_success:
            self._logger.info("email_sent")
            return OperationResult.success(message="Email sent")
        self._logger.warning("email_not_sent", error=result.message)
        return result
