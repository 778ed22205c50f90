"""Notification channel models.

Channel configuration is stored as a JSON object on the channel row; each
channel type has its own shape:

- email: ``{"email": "ops@example.com"}``
- sms: ``{"phone": "+33612345678"}``
- webhook: ``{"url": "https://...", "secret": "optional"}``
- slack: ``{"webhook_url": "https://hooks.slack.com/...", "channel": "#ops"}``
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, EmailStr, Field, ValidationError, field_validator

from infrastructure.operations import OperationResult


class ChannelType(str, Enum):
    EMAIL = "email"
    SMS = "sms"
    WEBHOOK = "webhook"
    SLACK = "slack"


class EmailChannelConfig(BaseModel):
    email: EmailStr


class SmsChannelConfig(BaseModel):
    phone: str

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v: str) -> str:
        """Validate E.164 phone format."""
        v = v.replace(" ", "")
        if not v.startswith("+") or not v[1:].isdigit():
            raise ValueError(f"Phone number must be in E.164 format: {v}")
        if len(v) < 8 or len(v) > 16:
            raise ValueError(f"Phone number length invalid: {v}")
        return v


class WebhookChannelConfig(BaseModel):
    url: str
    secret: Optional[str] = None

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        if not v.startswith("https://"):
            raise ValueError("Webhook URL must use https")
        return v


class SlackChannelConfig(BaseModel):
    webhook_url: str
    channel: Optional[str] = None

    @field_validator("webhook_url")
    @classmethod
    def validate_webhook_url(cls, v: str) -> str:
        if not v.startswith("https://hooks.slack.com/"):
            raise ValueError("Slack webhook URL must start with https://hooks.slack.com/")
        return v

    @field_validator("channel")
    @classmethod
    def validate_channel(cls, v: Optional[str]) -> Optional[str]:
        if v and not v.startswith("#"):
            return f"#{v}"
        return v or None


CHANNEL_CONFIG_MODELS = {
    ChannelType.EMAIL: EmailChannelConfig,
    ChannelType.SMS: SmsChannelConfig,
    ChannelType.WEBHOOK: WebhookChannelConfig,
    ChannelType.SLACK: SlackChannelConfig,
}


def validate_channel_config(
    channel_type: ChannelType, config: Dict[str, Any]
) -> OperationResult:
    """Validate ``config`` for ``channel_type``.

    Returns:
        OperationResult with the normalized config dict, or PERMANENT_ERROR
        with code INVALID_CHANNEL_CONFIG.
    """
    model = CHANNEL_CONFIG_MODELS[ChannelType(channel_type)]
    try:
        parsed = model.model_validate(config or {})
    except ValidationError as e:
        errors = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        return OperationResult.permanent_error(
            f"Invalid {ChannelType(channel_type).value} configuration: {errors}",
            error_code="INVALID_CHANNEL_CONFIG",
        )
    return OperationResult.success(data=parsed.model_dump(exclude_none=True))


class NotificationMessage(BaseModel):
    """A message to deliver through a channel."""

    subject: str
    body: str
    severity: str = "info"
    details: Dict[str, Any] = Field(default_factory=dict)
    sent_at: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )

    def as_text(self) -> str:
        return f"{self.subject}\n{self.body}" if self.body else self.subject


def build_test_message(channel_name: str) -> NotificationMessage:
    """Message sent when a user tests a channel from the console."""
    return NotificationMessage(
        subject="Test de notification",
        body=f"Ceci est un message de test pour le canal « {channel_name} ».",
        details={"test": True},
    )


def notification_request(
    user_id: str,
    message: NotificationMessage,
    channel: ChannelType,
    recipient: str,
    text: Optional[str] = None,
) -> Dict[str, Any]:
    """Body for the backend notification function.

    The function notifies ``userId`` on the flagged channels only; the
    configured address travels in ``data`` alongside the message details.
    """
    return {
        "userId": user_id,
        "type": "monitoring",
        "title": message.subject,
        "message": message.body if text is None else text,
        "channels": {
            "browser": False,
            "email": channel == ChannelType.EMAIL,
            "sms": channel == ChannelType.SMS,
        },
        "data": {**message.details, "severity": message.severity, "recipient": recipient},
    }
