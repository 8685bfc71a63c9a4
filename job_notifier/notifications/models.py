"""Data models and exceptions for the notification service.

This module defines result types and custom exceptions used throughout
the composition and delivery stages.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from job_notifier.domain.models import EmailDispatch, NotificationRecord, TelegramDispatch

TELEGRAM = "telegram"
EMAIL = "email"

STATUS_SENT = "sent"
STATUS_FAILED = "failed"


class NotificationError(Exception):
    """Base exception for notification-related errors."""

    pass


class NotificationTemplateError(NotificationError):
    """Raised when template rendering fails due to configuration or missing variables."""

    pass


class DeliveryError(NotificationError):
    """Raised when a provider rejects or fails a single send.

    Attributes:
        channel: "telegram" or "email"
        status_code: Provider HTTP status, or None for network errors
    """

    def __init__(self, message: str, channel: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.channel = channel
        self.status_code = status_code


@dataclass
class DispatchResult:
    """Outcome of one attempted send to one recipient.

    Attributes:
        channel: "telegram" or "email"
        recipient: Chat id or email address
        status: "sent" or "failed"
        user_id: Subscriber the payload was built for
        status_code: Provider HTTP status when a response was received
        error: Error description for failed sends
    """

    channel: str
    recipient: str
    status: str
    user_id: Optional[str] = None
    status_code: Optional[int] = None
    error: Optional[str] = None

    def is_success(self) -> bool:
        return self.status == STATUS_SENT


@dataclass
class ComposedNotification:
    """Everything composed for one matched subscriber.

    Attributes:
        record: In-app notification (always present)
        telegram: Telegram payload if the subscriber opted in and has a chat id
        email: Email payload if opted in and an address was resolved
        email_skipped: True when email was wanted but the address lookup failed
        failed_channels: Channels whose payload could not be rendered
    """

    record: NotificationRecord
    telegram: Optional[TelegramDispatch] = None
    email: Optional[EmailDispatch] = None
    email_skipped: bool = False
    failed_channels: List[str] = field(default_factory=list)


@dataclass
class DeliveryReport:
    """Per-channel results of one external delivery round."""

    telegram_attempted: int = 0
    email_attempted: int = 0
    results: List[DispatchResult] = field(default_factory=list)

    def _count(self, channel: str, status: str) -> int:
        return sum(1 for r in self.results if r.channel == channel and r.status == status)

    @property
    def telegram_delivered(self) -> int:
        return self._count(TELEGRAM, STATUS_SENT)

    @property
    def telegram_failed(self) -> int:
        return self._count(TELEGRAM, STATUS_FAILED)

    @property
    def email_delivered(self) -> int:
        return self._count(EMAIL, STATUS_SENT)

    @property
    def email_failed(self) -> int:
        return self._count(EMAIL, STATUS_FAILED)

    def failures(self) -> List[DispatchResult]:
        return [r for r in self.results if not r.is_success()]
