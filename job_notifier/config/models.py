"""Configuration schema models using Pydantic."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    """Log output formats."""

    JSON = "json"
    KEY_VALUE = "key-value"


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: LogLevel = Field(LogLevel.INFO, description="Log level")
    format: LogFormat = Field(
        LogFormat.KEY_VALUE, description="Log output format (json or key-value)"
    )

    model_config = {"use_enum_values": True}


class TelegramConfig(BaseModel):
    """Telegram Bot API settings."""

    api_base_url: str = Field(
        "https://api.telegram.org", description="Bot API base URL"
    )
    parse_mode: str = Field("HTML", description="parse_mode sent with every message")
    timeout: int = Field(15, ge=1, le=120, description="Request timeout (seconds)")

    @field_validator("api_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Strip whitespace and trailing slashes from the base URL."""
        stripped = v.strip().rstrip("/")
        if not stripped.startswith(("http://", "https://")):
            raise ValueError("api_base_url must be an http(s) URL")
        return stripped


class EmailConfig(BaseModel):
    """Transactional email provider settings."""

    api_url: str = Field(
        "https://api.resend.com/emails", description="Send-email endpoint"
    )
    sender: str = Field(
        "Zehulu Jobs <notifications@zehulu.jobs>",
        min_length=1,
        description="From header for notification emails",
    )
    timeout: int = Field(15, ge=1, le=120, description="Request timeout (seconds)")
    description_preview_chars: int = Field(
        200, ge=0, le=2000, description="Job description characters shown in emails"
    )

    @field_validator("api_url")
    @classmethod
    def validate_api_url(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped.startswith(("http://", "https://")):
            raise ValueError("api_url must be an http(s) URL")
        return stripped


class DeliveryConfig(BaseModel):
    """Fan-out settings for external delivery."""

    max_workers: int = Field(
        10, ge=1, le=100, description="Concurrent sends per channel"
    )


class SiteConfig(BaseModel):
    """Public site settings used for deep links."""

    default_public_url: str = Field(
        "https://zehulu.jobs", description="Used when PUBLIC_SITE_URL is unset"
    )

    @field_validator("default_public_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.strip().rstrip("/")


class ApiConfig(BaseModel):
    """HTTP surface settings."""

    cors_allow_origin: str = Field("*", description="Access-Control-Allow-Origin")
    cors_allow_headers: str = Field(
        "authorization, x-client-info, apikey, content-type",
        description="Access-Control-Allow-Headers",
    )


class AppConfig(BaseModel):
    """Root configuration object for the job notifier."""

    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Logging configuration"
    )
    telegram: TelegramConfig = Field(
        default_factory=TelegramConfig, description="Telegram settings"
    )
    email: EmailConfig = Field(default_factory=EmailConfig, description="Email settings")
    delivery: DeliveryConfig = Field(
        default_factory=DeliveryConfig, description="Delivery fan-out settings"
    )
    site: SiteConfig = Field(default_factory=SiteConfig, description="Public site settings")
    api: ApiConfig = Field(default_factory=ApiConfig, description="HTTP API settings")


class NotifierSettings(BaseModel):
    """Channel credentials and deep-link base passed into the pipeline.

    A channel whose credential is absent is disabled for the deployment;
    that is not an error.
    """

    telegram_bot_token: Optional[str] = None
    email_api_key: Optional[str] = None
    public_site_url: str = "https://zehulu.jobs"

    @field_validator("telegram_bot_token", "email_api_key", mode="before")
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip()
        return v or None

    @field_validator("public_site_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.strip().rstrip("/")

    @property
    def telegram_enabled(self) -> bool:
        return self.telegram_bot_token is not None

    @property
    def email_enabled(self) -> bool:
        return self.email_api_key is not None

    def __repr__(self) -> str:
        return (
            f"NotifierSettings(telegram_enabled={self.telegram_enabled}, "
            f"email_enabled={self.email_enabled}, "
            f"public_site_url={self.public_site_url!r})"
        )
