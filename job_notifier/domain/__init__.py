"""Domain models for the job notification service."""

from .models import (
    EmailDispatch,
    JobPosting,
    NotificationRecord,
    SubscriberProfile,
    TelegramDispatch,
)

__all__ = [
    "JobPosting",
    "SubscriberProfile",
    "NotificationRecord",
    "TelegramDispatch",
    "EmailDispatch",
]
