"""Data models for pipeline execution tracking and reporting."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from job_notifier.notifications.models import DispatchResult

READ_PROFILES = "read_profiles"
PERSIST_NOTIFICATIONS = "persist_notifications"


class PipelineError(Exception):
    """Fatal failure that aborts a notification run.

    Attributes:
        stage: Stage that failed ("read_profiles" or "persist_notifications")
    """

    def __init__(self, message: str, stage: str):
        super().__init__(message)
        self.message = message
        self.stage = stage


@dataclass
class PipelineRunResult:
    """
    Results from one notification run for a single job.

    Attributes:
        run_id: Identifier for log correlation
        job_id: Job that triggered the run
        total_job_seekers: Subscribers loaded from the preference store
        matched_users: Subscribers whose preferences matched the job
        notifications_sent: In-app notification records created
        telegram_notifications_sent: Telegram sends attempted
        email_notifications_sent: Email sends attempted
        email_skipped: Matched subscribers whose email address could not be resolved
        match_errors: Profiles skipped because matching raised
        compose_errors: Channel payloads dropped because composition raised
        duration_ms: Wall-clock run time
        deliveries: One result per attempted external send
    """

    run_id: str
    job_id: str
    total_job_seekers: int = 0
    matched_users: int = 0
    notifications_sent: int = 0
    telegram_notifications_sent: int = 0
    email_notifications_sent: int = 0
    email_skipped: int = 0
    match_errors: int = 0
    compose_errors: int = 0
    duration_ms: int = 0
    deliveries: List[DispatchResult] = field(default_factory=list)

    def _count(self, channel: str, success: bool) -> int:
        return sum(1 for d in self.deliveries if d.channel == channel and d.is_success() == success)

    @property
    def telegram_delivered(self) -> int:
        return self._count("telegram", True)

    @property
    def telegram_failed(self) -> int:
        return self._count("telegram", False)

    @property
    def email_delivered(self) -> int:
        return self._count("email", True)

    @property
    def email_failed(self) -> int:
        return self._count("email", False)

    def to_response(self) -> Dict[str, Any]:
        """Summary returned to the HTTP caller."""
        return {
            "success": True,
            "job_id": self.job_id,
            "total_job_seekers": self.total_job_seekers,
            "matched_users": self.matched_users,
            "notifications_sent": self.notifications_sent,
            "telegram_notifications_sent": self.telegram_notifications_sent,
            "email_notifications_sent": self.email_notifications_sent,
            "telegram_delivered": self.telegram_delivered,
            "telegram_failed": self.telegram_failed,
            "email_delivered": self.email_delivered,
            "email_failed": self.email_failed,
            "email_skipped": self.email_skipped,
            "match_errors": self.match_errors,
            "compose_errors": self.compose_errors,
            "duration_ms": self.duration_ms,
        }

    def failed_deliveries(self) -> List[Dict[str, Optional[Any]]]:
        return [
            {
                "channel": d.channel,
                "user_id": d.user_id,
                "status_code": d.status_code,
                "error": d.error,
            }
            for d in self.deliveries
            if not d.is_success()
        ]
