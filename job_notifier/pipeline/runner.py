"""Pipeline orchestration for job notification runs."""

import time
from contextlib import AbstractContextManager
from typing import Callable, List, Optional
from uuid import uuid4

from sqlalchemy.orm import Session

from job_notifier.config.environment import EnvironmentConfig
from job_notifier.config.models import AppConfig, NotifierSettings
from job_notifier.domain.models import (
    EmailDispatch,
    JobPosting,
    NotificationRecord,
    SubscriberProfile,
    TelegramDispatch,
)
from job_notifier.logging import get_logger
from job_notifier.logging.context import log_context
from job_notifier.matching.engine import PreferenceMatcher
from job_notifier.notifications.composer import NotificationComposer
from job_notifier.notifications.service import NotificationService
from job_notifier.persistence.database import get_session
from job_notifier.persistence.repositories import (
    IdentityRepository,
    NotificationRepository,
    ProfileRepository,
)
from job_notifier.utils.timestamps import elapsed_ms

from .models import PERSIST_NOTIFICATIONS, READ_PROFILES, PipelineError, PipelineRunResult

logger = get_logger(__name__, component="pipeline")

SessionFactory = Callable[[], AbstractContextManager]


class NotificationPipeline:
    """
    Runs the notification flow for one newly created job.

    The run is a fixed sequence: read subscribers, match and compose per
    subscriber, persist in-app notifications in one batch, then deliver
    Telegram and email messages. Only the read and the batch insert are
    fatal; everything else is isolated per subscriber or per send.

    Runs are not deduplicated: invoking run() twice for the same job
    creates two sets of notifications and sends everything twice.
    """

    def __init__(
        self,
        settings: NotifierSettings,
        matcher: PreferenceMatcher,
        composer: NotificationComposer,
        notification_service: NotificationService,
        session_factory: SessionFactory = get_session,
    ):
        """
        Initialize the notification pipeline.

        Args:
            settings: Channel credentials and public site URL
            matcher: Preference matcher evaluating each subscriber
            composer: Builds the record and channel payloads per match
            notification_service: External delivery of composed payloads
            session_factory: Context manager yielding a committed-on-exit Session
        """
        self.settings = settings
        self.matcher = matcher
        self.composer = composer
        self.notification_service = notification_service
        self.session_factory = session_factory

    def run(self, job: JobPosting) -> PipelineRunResult:
        """
        Execute one notification run for a job.

        Returns:
            PipelineRunResult with per-stage counts and delivery results

        Raises:
            PipelineError: If the subscriber read or the batch insert fails
        """
        started = time.monotonic()
        result = PipelineRunResult(run_id=uuid4().hex, job_id=job.job_id)

        with log_context(run_id=result.run_id, job_id=job.job_id):
            logger.info(
                f"Notification run started for job {job.job_id} ({job.company_name} - {job.job_title})",
                extra={"event": "pipeline.run.started"},
            )

            profiles = self._read_profiles()
            result.total_job_seekers = len(profiles)

            records: List[NotificationRecord] = []
            telegram_payloads: List[TelegramDispatch] = []
            email_payloads: List[EmailDispatch] = []

            for profile in profiles:
                with log_context(user_id=profile.user_id):
                    if not self._is_match(job, profile, result):
                        continue
                    result.matched_users += 1

                    try:
                        composed = self.composer.compose(job, profile)
                    except Exception as e:
                        result.compose_errors += 1
                        logger.error(
                            f"Failed to compose channel payloads for {profile.user_id}: {e}",
                            exc_info=True,
                            extra={
                                "event": "compose.failed",
                                "error_type": type(e).__name__,
                            },
                        )
                        # The in-app record is owed to every matched subscriber
                        records.append(self.composer.build_record(job, profile))
                        continue

                    result.compose_errors += len(composed.failed_channels)
                    records.append(composed.record)
                    if composed.telegram is not None:
                        telegram_payloads.append(composed.telegram)
                    if composed.email is not None:
                        email_payloads.append(composed.email)
                    if composed.email_skipped:
                        result.email_skipped += 1

            logger.info(
                f"Matched {result.matched_users} of {result.total_job_seekers} subscribers",
                extra={
                    "event": "pipeline.match.completed",
                    "total_job_seekers": result.total_job_seekers,
                    "matched_users": result.matched_users,
                    "match_errors": result.match_errors,
                    "telegram_composed": len(telegram_payloads),
                    "email_composed": len(email_payloads),
                },
            )

            result.notifications_sent = self._persist(records)

            report = self.notification_service.deliver(telegram_payloads, email_payloads)
            result.telegram_notifications_sent = report.telegram_attempted
            result.email_notifications_sent = report.email_attempted
            result.deliveries = report.results

            result.duration_ms = elapsed_ms(started)
            logger.info(
                "Notification run completed",
                extra={"event": "pipeline.run.completed", **result.to_response()},
            )

        return result

    def _read_profiles(self) -> List[SubscriberProfile]:
        try:
            with self.session_factory() as session:
                return ProfileRepository(session).list_notification_subscribers()
        except Exception as e:
            logger.error(
                f"Failed to load subscriber profiles: {e}",
                extra={"event": "pipeline.read.failed", "error_type": type(e).__name__},
            )
            raise PipelineError(str(e), stage=READ_PROFILES) from e

    def _is_match(self, job: JobPosting, profile: SubscriberProfile, result: PipelineRunResult) -> bool:
        try:
            return self.matcher.matches(job, profile)
        except Exception as e:
            result.match_errors += 1
            logger.warning(
                f"Skipping subscriber {profile.user_id}: match evaluation failed: {e}",
                extra={"event": "match.failed", "error_type": type(e).__name__},
            )
            return False

    def _persist(self, records: List[NotificationRecord]) -> int:
        if not records:
            return 0

        try:
            with self.session_factory() as session:
                inserted = NotificationRepository(session).insert_batch(records)
        except Exception as e:
            logger.error(
                f"Failed to insert {len(records)} in-app notifications: {e}",
                extra={"event": "pipeline.persist.failed", "error_type": type(e).__name__},
            )
            raise PipelineError(str(e), stage=PERSIST_NOTIFICATIONS) from e

        logger.info(
            f"Created {len(inserted)} in-app notifications",
            extra={"event": "pipeline.persist.completed", "count": len(inserted)},
        )
        return len(inserted)


def lookup_email(user_id: str, session_factory: SessionFactory = get_session) -> Optional[str]:
    """Resolve a subscriber's email address from the identity directory."""
    with session_factory() as session:
        return IdentityRepository(session).get_email(user_id)


def build_pipeline(
    app_config: AppConfig,
    env_config: EnvironmentConfig,
    session_factory: SessionFactory = get_session,
) -> NotificationPipeline:
    """
    Wire a NotificationPipeline from configuration.

    The database must already be initialized when session_factory is the
    default get_session.
    """
    settings = env_config.to_settings(app_config.site.default_public_url)

    composer = NotificationComposer(
        settings,
        email_config=app_config.email,
        resolve_email=lambda user_id: lookup_email(user_id, session_factory),
    )
    notification_service = NotificationService(settings, app_config)

    logger.info(
        "Notification pipeline initialized",
        extra={
            "event": "pipeline.initialized",
            "telegram_enabled": settings.telegram_enabled,
            "email_enabled": settings.email_enabled,
            "public_site_url": settings.public_site_url,
        },
    )

    return NotificationPipeline(
        settings=settings,
        matcher=PreferenceMatcher(),
        composer=composer,
        notification_service=notification_service,
        session_factory=session_factory,
    )
