"""HTTP clients for the external delivery providers.

ProviderClient holds the shared requests.Session handling; TelegramClient and
EmailClient implement one send per payload. A failed send always surfaces as
DeliveryError, never as a raw requests exception.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import requests

from job_notifier.config.models import EmailConfig, TelegramConfig
from job_notifier.domain.models import EmailDispatch, TelegramDispatch
from job_notifier.logging import get_logger

from .models import EMAIL, TELEGRAM, DeliveryError

logger = get_logger(__name__, component="delivery")

USER_AGENT = "JobNotifier/1.0"


class ProviderClient(ABC):
    """Base class for provider clients.

    Attributes:
        channel: Channel name used in errors and logs
        timeout: HTTP request timeout in seconds
    """

    channel: str = ""

    def __init__(self, timeout: int = 15, session: Optional[requests.Session] = None) -> None:
        self.timeout = timeout
        self._session = session or requests.Session()
        self._session.headers.update({"User-Agent": USER_AGENT})

    @abstractmethod
    def send(self, payload) -> Optional[int]:
        """Send one payload.

        Returns:
            Provider HTTP status code

        Raises:
            DeliveryError: If the provider rejected the payload or was unreachable
        """

    def close(self) -> None:
        self._session.close()

    def _post(
        self,
        url: str,
        json_data: Dict[str, Any],
        headers: Optional[Dict[str, str]] = None,
        display_url: Optional[str] = None,
    ) -> requests.Response:
        """POST a JSON body, mapping failures to DeliveryError.

        Args:
            url: Endpoint to call
            json_data: JSON body
            headers: Extra headers for this request
            display_url: URL safe to put in logs and error messages

        Returns:
            The successful (2xx) response

        Raises:
            DeliveryError: On 4xx/5xx, timeouts and connection errors
        """
        shown = display_url or url

        try:
            response = self._session.post(
                url,
                json=json_data,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.exceptions.Timeout as e:
            raise DeliveryError(
                f"Request to {shown} timed out after {self.timeout} seconds",
                channel=self.channel,
            ) from e
        except requests.exceptions.RequestException as e:
            # The exception text may contain the full URL
            raise DeliveryError(
                f"Request to {shown} failed: {type(e).__name__}",
                channel=self.channel,
            ) from e

        if response.status_code >= 400:
            raise DeliveryError(
                f"HTTP {response.status_code} from {shown}: {_error_detail(response)}",
                channel=self.channel,
                status_code=response.status_code,
            )

        return response


class TelegramClient(ProviderClient):
    """Telegram Bot API sendMessage client."""

    channel = TELEGRAM

    def __init__(
        self,
        bot_token: str,
        config: Optional[TelegramConfig] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        config = config or TelegramConfig()
        super().__init__(timeout=config.timeout, session=session)
        if not bot_token:
            raise ValueError("bot_token cannot be empty")
        self._bot_token = bot_token
        self.api_base_url = config.api_base_url
        self.parse_mode = config.parse_mode

    @property
    def send_message_url(self) -> str:
        return f"{self.api_base_url}/bot{self._bot_token}/sendMessage"

    @property
    def display_url(self) -> str:
        return f"{self.api_base_url}/bot***/sendMessage"

    def send(self, payload: TelegramDispatch) -> Optional[int]:
        response = self._post(
            self.send_message_url,
            json_data={
                "chat_id": payload.chat_id,
                "text": payload.text,
                "parse_mode": self.parse_mode,
            },
            display_url=self.display_url,
        )

        # The Bot API reports some failures with HTTP 200 and ok=false
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and body.get("ok") is False:
            raise DeliveryError(
                f"Telegram rejected message: {body.get('description', 'unknown error')}",
                channel=self.channel,
                status_code=response.status_code,
            )

        logger.debug(
            f"Telegram message accepted for chat {payload.chat_id}",
            extra={"event": "telegram.send.accepted", "chat_id": payload.chat_id},
        )
        return response.status_code


class EmailClient(ProviderClient):
    """Transactional email client (Resend-compatible send endpoint)."""

    channel = EMAIL

    def __init__(
        self,
        api_key: str,
        config: Optional[EmailConfig] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        config = config or EmailConfig()
        super().__init__(timeout=config.timeout, session=session)
        if not api_key:
            raise ValueError("api_key cannot be empty")
        self._api_key = api_key
        self.api_url = config.api_url
        self.sender = config.sender

    def send(self, payload: EmailDispatch) -> Optional[int]:
        response = self._post(
            self.api_url,
            json_data={
                "from": self.sender,
                "to": payload.to,
                "subject": payload.subject,
                "html": payload.html,
            },
            headers={"Authorization": f"Bearer {self._api_key}"},
        )
        logger.debug(
            f"Email accepted for {payload.to}",
            extra={"event": "email.send.accepted", "recipient": payload.to},
        )
        return response.status_code


def _error_detail(response: requests.Response, limit: int = 300) -> str:
    """Short provider error description from a failed response."""
    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict):
        for key in ("description", "message", "error"):
            if body.get(key):
                return str(body[key])[:limit]

    text = (response.text or "").strip()
    return text[:limit] if text else (response.reason or "no response body")
