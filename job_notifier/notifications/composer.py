"""Composition of per-subscriber notification payloads.

Composition is pure construction apart from the email address lookup:
nothing is persisted or sent here.
"""

import logging
from typing import Callable, Dict, Optional

from email_validator import EmailNotValidError, validate_email

from job_notifier.config.models import EmailConfig, NotifierSettings
from job_notifier.domain.models import (
    EmailDispatch,
    JobPosting,
    NotificationRecord,
    SubscriberProfile,
    TelegramDispatch,
)
from job_notifier.logging import get_logger

from . import messages
from .models import EMAIL, TELEGRAM, ComposedNotification, NotificationTemplateError
from .payloads import build_email_context, build_telegram_context
from .templates import TemplateRenderer

logger = get_logger(__name__, component="composer")

EmailResolver = Callable[[str], Optional[str]]


class NotificationComposer:
    """Builds the in-app record and the optional Telegram/email payloads.

    The Telegram text does not depend on the subscriber, so it is rendered
    once per job and reused.
    """

    def __init__(
        self,
        settings: NotifierSettings,
        email_config: Optional[EmailConfig] = None,
        resolve_email: Optional[EmailResolver] = None,
        template_renderer: Optional[TemplateRenderer] = None,
        logger_instance: Optional[logging.Logger] = None,
    ):
        """Initialize the composer.

        Args:
            settings: Deep-link base URL and channel credentials
            email_config: Email settings (description preview length)
            resolve_email: Lookup of an email address by user id
            template_renderer: Renderer instance (creates default if None)
            logger_instance: Logger instance (uses module logger if None)
        """
        self.settings = settings
        self.email_config = email_config or EmailConfig()
        self.resolve_email = resolve_email
        self.template_renderer = template_renderer or TemplateRenderer()
        self.logger = logger_instance or logger
        self._telegram_cache: Dict[str, str] = {}

    def compose(self, job: JobPosting, profile: SubscriberProfile) -> ComposedNotification:
        """Compose everything owed to one matched subscriber.

        The in-app record is always built. A Telegram or email payload that
        fails to render is dropped and its channel listed in
        ``failed_channels``; the other payloads are unaffected.
        """
        composed = ComposedNotification(record=self.build_record(job, profile))

        if profile.wants_telegram:
            try:
                composed.telegram = self.build_telegram(job, profile)
            except NotificationTemplateError as e:
                self._channel_failed(composed, TELEGRAM, profile.user_id, e)

        if profile.email_notifications:
            address = self._resolve_address(profile.user_id)
            if address is None:
                composed.email_skipped = True
            else:
                try:
                    composed.email = self.build_email(job, profile, address)
                except NotificationTemplateError as e:
                    self._channel_failed(composed, EMAIL, profile.user_id, e)

        return composed

    def _channel_failed(
        self, composed: ComposedNotification, channel: str, user_id: str, error: Exception
    ) -> None:
        composed.failed_channels.append(channel)
        self.logger.error(
            f"Failed to render {channel} notification for {user_id}: {error}",
            extra={
                "event": f"{channel}.compose.failed",
                "user_id": user_id,
                "error_type": type(error).__name__,
            },
        )

    def build_record(self, job: JobPosting, profile: SubscriberProfile) -> NotificationRecord:
        return NotificationRecord(
            user_id=profile.user_id,
            job_id=job.job_id,
            title=messages.NEW_JOB_TITLE,
            message=messages.in_app_message(job.company_name, job.city, job.job_title),
            is_read=False,
        )

    def build_telegram(self, job: JobPosting, profile: SubscriberProfile) -> TelegramDispatch:
        text = self._telegram_cache.get(job.job_id)
        if text is None:
            text = self.template_renderer.render_telegram(build_telegram_context(job))
            self._telegram_cache = {job.job_id: text}

        return TelegramDispatch(
            chat_id=profile.telegram_user_id,
            text=text,
            user_id=profile.user_id,
        )

    def build_email(
        self, job: JobPosting, profile: SubscriberProfile, address: str
    ) -> EmailDispatch:
        context = build_email_context(
            job,
            profile,
            public_site_url=self.settings.public_site_url,
            description_preview_chars=self.email_config.description_preview_chars,
        )
        rendered = self.template_renderer.render_email(context)

        return EmailDispatch(
            to=address,
            subject=rendered["subject"],
            html=rendered["html_body"],
            name=profile.full_name or messages.DEFAULT_RECIPIENT_NAME,
            user_id=profile.user_id,
        )

    def _resolve_address(self, user_id: str) -> Optional[str]:
        """Look up and validate the subscriber's email address.

        Any failure is logged and reported as None; email is then skipped
        for this subscriber only.
        """
        if self.resolve_email is None:
            self.logger.warning(
                f"No email resolver configured, skipping email for {user_id}",
                extra={"event": "email.resolve.skipped", "user_id": user_id},
            )
            return None

        try:
            address = self.resolve_email(user_id)
        except Exception as e:
            self.logger.error(
                f"Failed to resolve email address for {user_id}: {e}",
                extra={
                    "event": "email.resolve.failed",
                    "user_id": user_id,
                    "error_type": type(e).__name__,
                },
            )
            return None

        if not address:
            self.logger.warning(
                f"No email address on record for {user_id}",
                extra={"event": "email.resolve.missing", "user_id": user_id},
            )
            return None

        try:
            return validate_email(address, check_deliverability=False).normalized
        except EmailNotValidError as e:
            self.logger.warning(
                f"Invalid email address on record for {user_id}: {e}",
                extra={"event": "email.resolve.invalid", "user_id": user_id},
            )
            return None
