"""
Outbound notifications emitted by the modification workflow.

Delivery (email, push, in-app) belongs to other services. The workflow
only hands a ``Notification`` to whatever ``Notifier`` it was given.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

logger = logging.getLogger(__name__)

ADMIN_RECIPIENT = "admins"


class NotificationEvent(str, Enum):
    MODIFICATION_SUBMITTED = "modification_submitted"
    MODIFICATION_APPROVED = "modification_approved"
    MODIFICATION_REJECTED = "modification_rejected"
    MODIFICATION_ACCEPTED = "modification_accepted"
    MODIFICATION_DECLINED = "modification_declined"


@dataclass(frozen=True)
class Notification:
    recipient_id: str
    event: NotificationEvent
    booking_id: str
    modification_id: str
    message: str


class Notifier(Protocol):
    def send(self, notification: Notification) -> None:
        ...


class LoggingNotifier:
    """Default notifier: writes each notification to the log."""

    def send(self, notification: Notification) -> None:
        logger.info(
            "Notify %s [%s] booking=%s modification=%s: %s",
            notification.recipient_id, notification.event.value,
            notification.booking_id, notification.modification_id, notification.message,
        )


class RecordingNotifier:
    """Keeps every notification in memory, for the console walkthrough and tests."""

    def __init__(self) -> None:
        self.sent: list[Notification] = []

    def send(self, notification: Notification) -> None:
        self.sent.append(notification)

    def events_for(self, recipient_id: str) -> list[NotificationEvent]:
        return [n.event for n in self.sent if n.recipient_id == recipient_id]
