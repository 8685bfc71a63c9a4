"""Integration tests for the notification pipeline.

Runs build_pipeline against a real in-memory SQLite database; only the
provider HTTP calls are mocked (requests.Session), so every stage from the
subscriber read to the fan-out runs for real.
"""

from unittest.mock import Mock, patch

import pytest
import requests
from fastapi.testclient import TestClient
from sqlalchemy import text

from job_notifier.api import NOTIFY_PATH, create_app
from job_notifier.config.environment import EnvironmentConfig
from job_notifier.config.models import AppConfig
from job_notifier.domain.models import JobPosting, SubscriberProfile
from job_notifier.persistence.database import (
    close_database,
    get_engine,
    get_session,
    init_database,
)
from job_notifier.persistence.repositories import (
    IdentityRepository,
    NotificationRepository,
    ProfileRepository,
)
from job_notifier.persistence.schema import EMPLOYER
from job_notifier.pipeline import READ_PROFILES, PipelineError, build_pipeline

BOT_TOKEN = "123456:integration-token"


@pytest.fixture
def database():
    """Create an in-memory database for integration tests."""
    init_database("sqlite:///:memory:")
    yield
    close_database()


@pytest.fixture
def http_session():
    """Replace requests.Session so provider calls are recorded, not sent."""
    session = Mock(spec=requests.Session)
    session.headers = {}

    def post(url, json=None, headers=None, timeout=None):
        response = Mock(spec=requests.Response)
        response.status_code = 200
        response.text = ""
        if "sendMessage" in url:
            response.json.return_value = {"ok": True, "result": {"message_id": 1}}
        else:
            response.json.return_value = {"id": "email-1"}
        return response

    session.post.side_effect = post
    with patch("requests.Session", return_value=session):
        yield session


def seed(profiles, emails=None, user_type=None):
    emails = emails or {}
    with get_session() as session:
        profile_repo = ProfileRepository(session)
        identity_repo = IdentityRepository(session)
        for profile in profiles:
            if user_type:
                profile_repo.upsert(profile, user_type=user_type)
            else:
                profile_repo.upsert(profile)
            identity_repo.upsert(profile.user_id, emails.get(profile.user_id))


def make_pipeline(telegram_bot_token=BOT_TOKEN, email_api_key="re_integration"):
    env = EnvironmentConfig(
        telegram_bot_token=telegram_bot_token,
        email_api_key=email_api_key,
        public_site_url="https://zehulu.jobs",
        database_url="sqlite:///:memory:",
    )
    return build_pipeline(AppConfig(), env)


def telegram_calls(session):
    return [c for c in session.post.call_args_list if "sendMessage" in c.args[0]]


def email_calls(session):
    return [c for c in session.post.call_args_list if "sendMessage" not in c.args[0]]


def stored_notifications(job_id):
    with get_session() as session:
        return NotificationRepository(session).list_for_job(job_id)


@pytest.fixture
def driver_job():
    return JobPosting(
        job_id="job-driver",
        job_title="Driver",
        company_name="Selam Transport",
        city="Addis Ababa",
        category="Transport",
        job_type="Full-time",
    )


class TestPipelineNotifications:
    def test_transport_subscriber_gets_record_and_email(self, database, http_session, driver_job):
        seed(
            [SubscriberProfile(user_id="user-1", notification_categories=["Transport"])],
            emails={"user-1": "abebe@example.com"},
        )

        result = make_pipeline().run(driver_job)

        assert result.total_job_seekers == 1
        assert result.matched_users == 1
        assert result.notifications_sent == 1
        assert result.email_notifications_sent == 1
        assert result.telegram_notifications_sent == 0
        assert result.email_delivered == 1

        records = stored_notifications("job-driver")
        assert len(records) == 1
        assert records[0].user_id == "user-1"
        assert records[0].is_read is False

        (call,) = email_calls(http_session)
        assert call.kwargs["json"]["to"] == "abebe@example.com"
        assert "https://zehulu.jobs/#/jobs/job-driver" in call.kwargs["json"]["html"]
        assert telegram_calls(http_session) == []

    def test_finance_subscriber_gets_nothing(self, database, http_session, driver_job):
        seed(
            [SubscriberProfile(user_id="user-2", notification_categories=["Finance"])],
            emails={"user-2": "hana@example.com"},
        )

        result = make_pipeline().run(driver_job)

        assert result.total_job_seekers == 1
        assert result.matched_users == 0
        assert result.notifications_sent == 0
        assert stored_notifications("job-driver") == []
        http_session.post.assert_not_called()

    def test_employers_and_disabled_profiles_excluded(self, database, http_session, driver_job):
        seed([SubscriberProfile(user_id="employer-1")], user_type=EMPLOYER)
        seed([SubscriberProfile(user_id="user-off", notification_enabled=False)])

        result = make_pipeline().run(driver_job)

        assert result.total_job_seekers == 0
        http_session.post.assert_not_called()

    def test_telegram_and_email_for_opted_in_subscriber(self, database, http_session, driver_job):
        seed(
            [
                SubscriberProfile(
                    user_id="user-3",
                    telegram_notifications=True,
                    telegram_user_id="987654",
                )
            ],
            emails={"user-3": "selam@example.com"},
        )

        result = make_pipeline().run(driver_job)

        assert result.telegram_notifications_sent == 1
        assert result.telegram_delivered == 1
        assert result.email_notifications_sent == 1
        (call,) = telegram_calls(http_session)
        assert call.args[0] == f"https://api.telegram.org/bot{BOT_TOKEN}/sendMessage"
        assert call.kwargs["json"]["chat_id"] == "987654"
        assert call.kwargs["json"]["parse_mode"] == "HTML"

    def test_email_resolution_failure_keeps_record_and_telegram(
        self, database, http_session, driver_job
    ):
        seed(
            [
                SubscriberProfile(
                    user_id="user-3",
                    telegram_notifications=True,
                    telegram_user_id="987654",
                )
            ],
        )
        with get_engine().begin() as conn:
            conn.execute(text("DROP TABLE users"))

        pipeline = make_pipeline()
        response = TestClient(create_app(pipeline)).post(
            NOTIFY_PATH, json=driver_job.model_dump()
        )

        assert response.status_code == 200
        body = response.json()
        assert body["notifications_sent"] == 1
        assert body["telegram_notifications_sent"] == 1
        assert body["email_notifications_sent"] == 0
        assert body["email_skipped"] == 1
        assert len(stored_notifications("job-driver")) == 1
        assert len(telegram_calls(http_session)) == 1
        assert email_calls(http_session) == []

    def test_no_bot_token_means_no_telegram_calls(self, database, http_session, driver_job):
        seed(
            [
                SubscriberProfile(
                    user_id=f"user-{i}", telegram_notifications=True, telegram_user_id=str(i)
                )
                for i in range(3)
            ],
            emails={f"user-{i}": f"user{i}@example.com" for i in range(3)},
        )

        result = make_pipeline(telegram_bot_token=None).run(driver_job)

        assert result.notifications_sent == 3
        assert result.telegram_notifications_sent == 0
        assert result.email_notifications_sent == 3
        assert telegram_calls(http_session) == []
        assert len(email_calls(http_session)) == 3

    def test_provider_failure_does_not_fail_run(self, database, http_session, driver_job):
        seed(
            [SubscriberProfile(user_id="user-1"), SubscriberProfile(user_id="user-2")],
            emails={"user-1": "abebe@example.com", "user-2": "hana@example.com"},
        )

        def post(url, json=None, headers=None, timeout=None):
            if json["to"] == "hana@example.com":
                raise requests.exceptions.ConnectionError("unreachable")
            response = Mock(spec=requests.Response)
            response.status_code = 200
            response.json.return_value = {"id": "email-1"}
            return response

        http_session.post.side_effect = post

        result = make_pipeline().run(driver_job)

        assert result.email_notifications_sent == 2
        assert result.email_delivered == 1
        assert result.email_failed == 1
        assert result.failed_deliveries()[0]["user_id"] == "user-2"

    def test_preference_read_failure_is_fatal(self, database, http_session, driver_job):
        with get_engine().begin() as conn:
            conn.execute(text("DROP TABLE profiles"))

        pipeline = make_pipeline()

        with pytest.raises(PipelineError) as exc_info:
            pipeline.run(driver_job)
        assert exc_info.value.stage == READ_PROFILES

        response = TestClient(create_app(pipeline)).post(
            NOTIFY_PATH, json=driver_job.model_dump()
        )
        assert response.status_code == 500
        assert "error" in response.json()
        assert stored_notifications("job-driver") == []
        http_session.post.assert_not_called()

    def test_repeated_invocation_duplicates_notifications(
        self, database, http_session, driver_job
    ):
        seed(
            [SubscriberProfile(user_id="user-1", notification_categories=["Transport"])],
            emails={"user-1": "abebe@example.com"},
        )
        pipeline = make_pipeline()

        pipeline.run(driver_job)
        pipeline.run(driver_job)

        assert len(stored_notifications("job-driver")) == 2
        assert len(email_calls(http_session)) == 2
