"""SMS channel delegated to the backend notification function."""

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

# Single-segment SMS
MAX_SMS_LENGTH = 160


class SMSChannel(NotificationChannel):
    """Send SMS through the backend's notification function."""

    def __init__(
        self, phone: str, backend: "BackendClient", function_name: str, user_id: str
    ) -> None:
        self._phone = phone
        self._user_id = user_id
        self._backend = backend
        self._function_name = function_name
        self._logger = logger.bind(component="sms_channel")

    @property
    def channel_name(self) -> str:
        return "sms"

    @property
    def target(self) -> str:
        return self._phone

    def _deliver(self, message: NotificationMessage) -> OperationResult:
        text = message.as_text().replace("\n", " - ")
        if len(text) > MAX_SMS_LENGTH:
            text = text[: MAX_SMS_LENGTH - 3] + "..."

        result = self._backend.invoke_function(
            self._function_name,
            notification_request(
                self._user_id, message, ChannelType.SMS, self._phone, text=text
            ),
        )
        if result.is_success:
            self._logger.info("sms_sent")
            return OperationResult.success(message="SMS sent")
        self._logger.warning("sms_not_sent", error=result.message)
        return result
