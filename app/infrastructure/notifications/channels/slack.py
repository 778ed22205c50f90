"""Slack incoming-webhook channel."""

from typing import Optional

import requests
import structlog

from infrastructure.notifications.channels.base import NotificationChannel
from infrastructure.notifications.models import NotificationMessage
from infrastructure.operations import (
    OperationResult,
    classify_http_response,
    classify_request_exception,
)

logger = structlog.get_logger()

SEVERITY_EMOJI = {
    "info": ":information_source:",
    "warning": ":warning:",
    "critical": ":rotating_light:",
}


class SlackChannel(NotificationChannel):
    """Post messages to a Slack incoming webhook."""

    def __init__(
        self,
        webhook_url: str,
        channel: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: int = 10,
    ) -> None:
        self._webhook_url = webhook_url
        self._channel = channel
        self._session = session or requests.Session()
        self._timeout = timeout
        self._logger = logger.bind(component="slack_channel", channel=channel)

    @property
    def channel_name(self) -> str:
        return "slack"

    @property
    def target(self) -> str:
        return self._webhook_url

    def build_payload(self, message: NotificationMessage) -> dict:
        emoji = SEVERITY_EMOJI.get(message.severity, SEVERITY_EMOJI["info"])
        payload = {"text": f"{emoji} *{message.subject}*\n{message.body}".rstrip()}
        if self._channel:
            payload["channel"] = self._channel
        return payload

    def _deliver(self, message: NotificationMessage) -> OperationResult:
        try:
            response = self._session.post(
                self._webhook_url,
                json=self.build_payload(message),
                timeout=self._timeout,
            )
        except requests.RequestException as e:
            self._logger.error("slack_delivery_failed", error=str(e))
            return classify_request_exception(e)

        if not response.ok:
            self._logger.warning("slack_rejected", status_code=response.status_code)
            return classify_http_response(response)

        self._logger.info("slack_delivered")
        return OperationResult.success(message="Slack message delivered")
