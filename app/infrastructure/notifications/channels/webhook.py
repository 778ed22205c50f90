"""Generic HTTPS webhook channel."""

import hashlib
import hmac
import json
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

SIGNATURE_HEADER = "X-Signature"


def sign_payload(secret: str, body: bytes) -> str:
    """HMAC-SHA256 hex digest of the exact request body."""
    return hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()


class WebhookChannel(NotificationChannel):
    """POST the message as JSON to a user supplied endpoint.

    When a secret is configured the body is signed and the hex digest sent
    in the ``X-Signature`` header.
    """

    def __init__(
        self,
        url: str,
        secret: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: int = 10,
    ) -> None:
        self._url = url
        self._secret = secret
        self._session = session or requests.Session()
        self._timeout = timeout
        self._logger = logger.bind(component="webhook_channel", url=url)

    @property
    def channel_name(self) -> str:
        return "webhook"

    @property
    def target(self) -> str:
        return self._url

    def _deliver(self, message: NotificationMessage) -> OperationResult:
        body = json.dumps(message.model_dump(), ensure_ascii=False).encode("utf-8")
        headers = {"Content-Type": "application/json"}
        if self._secret:
            headers[SIGNATURE_HEADER] = sign_payload(self._secret, body)

        try:
            response = self._session.post(
                self._url, data=body, headers=headers, timeout=self._timeout
            )
        except requests.RequestException as e:
            self._logger.error("webhook_delivery_failed", error=str(e))
            return classify_request_exception(e)

        if not response.ok:
            self._logger.warning("webhook_rejected", status_code=response.status_code)
            return classify_http_response(response)

        self._logger.info("webhook_delivered", status_code=response.status_code)
        return OperationResult.success(message="Webhook delivered")
