"""Notification service for external delivery of job alerts.

The NotificationService owns the provider clients and hands each channel's
payloads to the fan-out. A channel whose credential is missing is skipped
entirely: no sends are attempted and its attempted count stays zero.
"""

import logging
from typing import List, Optional, Sequence

from job_notifier.config.models import AppConfig, NotifierSettings
from job_notifier.domain.models import EmailDispatch, TelegramDispatch
from job_notifier.logging import get_logger

from .fanout import DeliveryFanOut
from .http_client import EmailClient, TelegramClient
from .models import EMAIL, TELEGRAM, DeliveryReport

logger = get_logger(__name__, component="notification")


class NotificationService:
    """Service for delivering composed notifications over Telegram and email.

    Telegram sends and email sends run concurrently within their channel.
    Results are collected after every send has settled; delivery failures
    are reported, never raised.
    """

    def __init__(
        self,
        settings: NotifierSettings,
        app_config: Optional[AppConfig] = None,
        telegram_client: Optional[TelegramClient] = None,
        email_client: Optional[EmailClient] = None,
        fanout: Optional[DeliveryFanOut] = None,
        logger_instance: Optional[logging.Logger] = None,
    ):
        """Initialize notification service.

        Args:
            settings: Channel credentials and public site URL
            app_config: Application configuration (defaults if None)
            telegram_client: Telegram client (created from settings if None)
            email_client: Email client (created from settings if None)
            fanout: Fan-out executor (created from delivery config if None)
            logger_instance: Logger instance (uses module logger if None)
        """
        app_config = app_config or AppConfig()
        self.settings = settings
        self.logger = logger_instance or logger

        if telegram_client is None and settings.telegram_enabled:
            telegram_client = TelegramClient(settings.telegram_bot_token, app_config.telegram)
        if email_client is None and settings.email_enabled:
            email_client = EmailClient(settings.email_api_key, app_config.email)

        self.telegram_client = telegram_client
        self.email_client = email_client
        self.fanout = fanout or DeliveryFanOut(max_workers=app_config.delivery.max_workers)

    @property
    def telegram_enabled(self) -> bool:
        return self.settings.telegram_enabled and self.telegram_client is not None

    @property
    def email_enabled(self) -> bool:
        return self.settings.email_enabled and self.email_client is not None

    def deliver(
        self,
        telegram_payloads: Sequence[TelegramDispatch],
        email_payloads: Sequence[EmailDispatch],
    ) -> DeliveryReport:
        """Deliver all payloads and report per-channel outcomes.

        Args:
            telegram_payloads: Composed Telegram messages
            email_payloads: Composed emails

        Returns:
            DeliveryReport with one result per attempted send
        """
        report = DeliveryReport()

        if telegram_payloads:
            if self.telegram_enabled:
                report.telegram_attempted = len(telegram_payloads)
                report.results.extend(
                    self.fanout.dispatch(TELEGRAM, telegram_payloads, self.telegram_client.send)
                )
            else:
                self.logger.info(
                    f"Telegram not configured, skipping {len(telegram_payloads)} message(s)",
                    extra={"event": "telegram.skipped", "count": len(telegram_payloads)},
                )

        if email_payloads:
            if self.email_enabled:
                report.email_attempted = len(email_payloads)
                report.results.extend(
                    self.fanout.dispatch(EMAIL, email_payloads, self.email_client.send)
                )
            else:
                self.logger.info(
                    f"Email not configured, skipping {len(email_payloads)} message(s)",
                    extra={"event": "email.skipped", "count": len(email_payloads)},
                )

        self._log_summary(report)
        return report

    def close(self) -> None:
        for client in (self.telegram_client, self.email_client):
            if client is not None:
                client.close()

    def _log_summary(self, report: DeliveryReport) -> None:
        failures: List = report.failures()
        self.logger.info(
            f"Delivery complete: telegram {report.telegram_delivered}/{report.telegram_attempted} sent, "
            f"email {report.email_delivered}/{report.email_attempted} sent, "
            f"{len(failures)} failed",
            extra={
                "event": "delivery.complete",
                "telegram_attempted": report.telegram_attempted,
                "telegram_delivered": report.telegram_delivered,
                "email_attempted": report.email_attempted,
                "email_delivered": report.email_delivered,
            },
        )
