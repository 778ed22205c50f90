"""Build channel instances from stored channel rows."""

from typing import TYPE_CHECKING, Any, Dict, Optional

from infrastructure.notifications.channels import (
    EmailChannel,
    NotificationChannel,
    SlackChannel,
    SMSChannel,
    WebhookChannel,
)
from infrastructure.notifications.models import ChannelType, validate_channel_config
from infrastructure.operations import OperationResult

if TYPE_CHECKING:
    from infrastructure.clients.backend import BackendClient

DEFAULT_NOTIFICATION_FUNCTION = "send-notification"


def build_channel(
    channel_type: str,
    config: Dict[str, Any],
    backend: "BackendClient",
    function_name: str = DEFAULT_NOTIFICATION_FUNCTION,
    user_id: Optional[str] = None,
) -> OperationResult:
    """Validate ``config`` and return the matching NotificationChannel.

    Email and SMS are delivered by the backend function to ``user_id``, so
    those types need one.

    Returns:
        OperationResult with the channel in ``data``, or PERMANENT_ERROR for
        an unknown type or invalid configuration.
    """
    try:
        kind = ChannelType(channel_type)
    except ValueError:
        return OperationResult.permanent_error(
            f"Unknown channel type: {channel_type}", error_code="INVALID_CHANNEL_TYPE"
        )

    validated = validate_channel_config(kind, config)
    if not validated.is_success:
        return validated
    cfg = validated.data

    if kind in (ChannelType.EMAIL, ChannelType.SMS) and not user_id:
        return OperationResult.permanent_error(
            f"A {kind.value} channel needs a recipient user", error_code="MISSING_RECIPIENT"
        )

    channel: NotificationChannel
    if kind == ChannelType.EMAIL:
        channel = EmailChannel(cfg["email"], backend, function_name, user_id)
    elif kind == ChannelType.SMS:
        channel = SMSChannel(cfg["phone"], backend, function_name, user_id)
    elif kind == ChannelType.WEBHOOK:
        channel = WebhookChannel(cfg["url"], secret=cfg.get("secret"))
    else:
        channel = SlackChannel(cfg["webhook_url"], channel=cfg.get("channel"))
    return OperationResult.success(data=channel)
