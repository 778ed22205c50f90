"""Notification channel implementations."""

from infrastructure.notifications.channels.base import NotificationChannel
from infrastructure.notifications.channels.email import EmailChannel
from infrastructure.notifications.channels.slack import SlackChannel
from infrastructure.notifications.channels.sms import SMSChannel
from infrastructure.notifications.channels.webhook import WebhookChannel

__all__ = [
    "NotificationChannel",
    "EmailChannel",
    "SlackChannel",
    "SMSChannel",
    "WebhookChannel",
]
