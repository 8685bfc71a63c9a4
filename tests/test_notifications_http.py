"""Unit tests for the Telegram and email provider clients.

The requests.Session is replaced by a Mock so no network calls are made.
"""

from unittest.mock import Mock

import pytest
import requests

from job_notifier.config.models import EmailConfig, TelegramConfig
from job_notifier.domain.models import EmailDispatch, TelegramDispatch
from job_notifier.notifications.http_client import EmailClient, TelegramClient
from job_notifier.notifications.models import DeliveryError

BOT_TOKEN = "123456:SECRET-token"


def make_response(status_code=200, json_body=None, text=""):
    response = Mock(spec=requests.Response)
    response.status_code = status_code
    response.text = text
    response.reason = "Reason"
    if json_body is None:
        response.json.side_effect = ValueError("no json")
    else:
        response.json.return_value = json_body
    return response


@pytest.fixture
def session():
    mock_session = Mock(spec=requests.Session)
    mock_session.headers = {}
    return mock_session


@pytest.fixture
def telegram_payload():
    return TelegramDispatch(chat_id="987654", text="🎯 አዲስ የስራ እድል ታገኘ!", user_id="user-1")


@pytest.fixture
def email_payload():
    return EmailDispatch(
        to="abebe@example.com",
        subject="አዲስ የስራ እድል: Driver በ Selam Transport",
        html="<p>hi</p>",
        user_id="user-1",
    )


class TestTelegramClient:
    def test_send_posts_send_message(self, session, telegram_payload):
        session.post.return_value = make_response(200, {"ok": True, "result": {}})
        client = TelegramClient(BOT_TOKEN, TelegramConfig(timeout=7), session=session)

        status = client.send(telegram_payload)

        assert status == 200
        session.post.assert_called_once_with(
            f"https://api.telegram.org/bot{BOT_TOKEN}/sendMessage",
            json={
                "chat_id": "987654",
                "text": "🎯 አዲስ የስራ እድል ታገኘ!",
                "parse_mode": "HTML",
            },
            headers=None,
            timeout=7,
        )

    def test_sets_user_agent(self, session):
        TelegramClient(BOT_TOKEN, session=session)
        assert session.headers["User-Agent"].startswith("JobNotifier/")

    def test_empty_token_rejected(self, session):
        with pytest.raises(ValueError):
            TelegramClient("", session=session)

    def test_http_error_raises_delivery_error_without_token(self, session, telegram_payload):
        session.post.return_value = make_response(
            400, {"ok": False, "description": "Bad Request: chat not found"}
        )
        client = TelegramClient(BOT_TOKEN, session=session)

        with pytest.raises(DeliveryError) as exc_info:
            client.send(telegram_payload)

        error = exc_info.value
        assert error.channel == "telegram"
        assert error.status_code == 400
        assert "chat not found" in str(error)
        assert "SECRET" not in str(error)

    def test_ok_false_with_200_is_failure(self, session, telegram_payload):
        session.post.return_value = make_response(200, {"ok": False, "description": "blocked"})
        client = TelegramClient(BOT_TOKEN, session=session)

        with pytest.raises(DeliveryError, match="blocked"):
            client.send(telegram_payload)

    def test_timeout(self, session, telegram_payload):
        session.post.side_effect = requests.exceptions.Timeout("read timed out")
        client = TelegramClient(BOT_TOKEN, session=session)

        with pytest.raises(DeliveryError, match="timed out") as exc_info:
            client.send(telegram_payload)
        assert exc_info.value.status_code is None

    def test_connection_error_hides_url(self, session, telegram_payload):
        session.post.side_effect = requests.exceptions.ConnectionError(
            f"Max retries exceeded with url: /bot{BOT_TOKEN}/sendMessage"
        )
        client = TelegramClient(BOT_TOKEN, session=session)

        with pytest.raises(DeliveryError) as exc_info:
            client.send(telegram_payload)

        assert "ConnectionError" in str(exc_info.value)
        assert "SECRET" not in str(exc_info.value)

    def test_custom_base_url(self, session, telegram_payload):
        session.post.return_value = make_response(200, {"ok": True})
        config = TelegramConfig(api_base_url="http://localhost:8081/")
        client = TelegramClient(BOT_TOKEN, config, session=session)

        client.send(telegram_payload)

        assert session.post.call_args.args[0] == f"http://localhost:8081/bot{BOT_TOKEN}/sendMessage"
        assert client.display_url == "http://localhost:8081/bot***/sendMessage"


class TestEmailClient:
    def test_send_posts_email(self, session, email_payload):
        session.post.return_value = make_response(200, {"id": "email-1"})
        client = EmailClient("re_key", EmailConfig(), session=session)

        status = client.send(email_payload)

        assert status == 200
        session.post.assert_called_once_with(
            "https://api.resend.com/emails",
            json={
                "from": "Zehulu Jobs <notifications@zehulu.jobs>",
                "to": "abebe@example.com",
                "subject": "አዲስ የስራ እድል: Driver በ Selam Transport",
                "html": "<p>hi</p>",
            },
            headers={"Authorization": "Bearer re_key"},
            timeout=15,
        )

    def test_empty_key_rejected(self, session):
        with pytest.raises(ValueError):
            EmailClient("", session=session)

    def test_provider_error(self, session, email_payload):
        session.post.return_value = make_response(
            422, {"name": "validation_error", "message": "Invalid `to` field"}
        )
        client = EmailClient("re_key", session=session)

        with pytest.raises(DeliveryError) as exc_info:
            client.send(email_payload)

        assert exc_info.value.channel == "email"
        assert exc_info.value.status_code == 422
        assert "Invalid `to` field" in str(exc_info.value)
        assert "re_key" not in str(exc_info.value)

    def test_server_error_with_text_body(self, session, email_payload):
        session.post.return_value = make_response(503, None, text="Service Unavailable")
        client = EmailClient("re_key", session=session)

        with pytest.raises(DeliveryError, match="Service Unavailable"):
            client.send(email_payload)

    def test_request_exception(self, session, email_payload):
        session.post.side_effect = requests.exceptions.SSLError("bad handshake")
        client = EmailClient("re_key", session=session)

        with pytest.raises(DeliveryError, match="SSLError"):
            client.send(email_payload)

    def test_close_closes_session(self, session):
        EmailClient("re_key", session=session).close()
        session.close.assert_called_once()
