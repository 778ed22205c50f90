"""Notification channel abstract base class."""

from abc import ABC, abstractmethod

from infrastructure.notifications.models import NotificationMessage
from infrastructure.operations import OperationResult
from infrastructure.resilience import get_circuit_breaker


class NotificationChannel(ABC):
    """Delivery through one configured channel.

    Subclasses implement ``_deliver``; ``send`` routes every delivery
    through a circuit breaker keyed on the delivery target so a dead
    endpoint fails fast instead of timing out on each message.
    """

    @property
    @abstractmethod
    def channel_name(self) -> str:
        """Channel type identifier (email, sms, webhook, slack)."""

    @property
    @abstractmethod
    def target(self) -> str:
        """Address, phone number or URL the channel delivers to."""

    @abstractmethod
    def _deliver(self, message: NotificationMessage) -> OperationResult:
        """Send one message. Must return, not raise."""

    def send(self, message: NotificationMessage) -> OperationResult:
        breaker = get_circuit_breaker(f"{self.channel_name}:{self.target}")
        return breaker.call(self._deliver, message)
