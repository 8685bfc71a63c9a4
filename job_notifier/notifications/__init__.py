"""Notification composition and delivery for new job postings.

This package provides:
- NotificationComposer: builds the in-app record and channel payloads per match
- TemplateRenderer: Jinja2 rendering of the Telegram text and the email
- TelegramClient / EmailClient: provider HTTP clients
- DeliveryFanOut: concurrent per-channel sends with per-item isolation
- NotificationService: delivers composed payloads and reports outcomes
"""

from .composer import NotificationComposer
from .fanout import DeliveryFanOut
from .http_client import EmailClient, ProviderClient, TelegramClient
from .models import (
    EMAIL,
    STATUS_FAILED,
    STATUS_SENT,
    TELEGRAM,
    ComposedNotification,
    DeliveryError,
    DeliveryReport,
    DispatchResult,
    NotificationError,
    NotificationTemplateError,
)
from .payloads import build_email_context, build_job_url, build_telegram_context
from .service import NotificationService
from .templates import TemplateRenderer

__all__ = [
    # Main service
    "NotificationService",
    "NotificationComposer",
    # Models and results
    "ComposedNotification",
    "DispatchResult",
    "DeliveryReport",
    "TELEGRAM",
    "EMAIL",
    "STATUS_SENT",
    "STATUS_FAILED",
    # Exceptions
    "NotificationError",
    "NotificationTemplateError",
    "DeliveryError",
    # Components
    "TemplateRenderer",
    "ProviderClient",
    "TelegramClient",
    "EmailClient",
    "DeliveryFanOut",
    # Utilities
    "build_job_url",
    "build_telegram_context",
    "build_email_context",
]
