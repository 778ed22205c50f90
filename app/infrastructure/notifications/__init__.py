"""Notification channels for monitoring alerts.

Exports:
    ChannelType, NotificationMessage: Models
    validate_channel_config: Per-type configuration validation
    build_channel: Channel factory from stored configuration
"""

from infrastructure.notifications.channels import NotificationChannel
from infrastructure.notifications.factory import build_channel
from infrastructure.notifications.models import (
    ChannelType,
    NotificationMessage,
    build_test_message,
    notification_request,
    validate_channel_config,
)

__all__ = [
    "ChannelType",
    "NotificationChannel",
    "NotificationMessage",
    "build_channel",
    "build_test_message",
    "notification_request",
    "validate_channel_config",
]
