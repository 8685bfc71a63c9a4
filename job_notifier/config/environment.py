"""Environment variable loading and validation."""

import os
from typing import Optional

from .exceptions import ConfigurationError
from .models import NotifierSettings


class EnvironmentConfig:
    """Environment variable configuration holder."""

    def __init__(
        self,
        telegram_bot_token: Optional[str] = None,
        email_api_key: Optional[str] = None,
        public_site_url: Optional[str] = None,
        log_level: Optional[str] = None,
        database_url: Optional[str] = None,
        environment: Optional[str] = None,
    ):
        """Initialize environment configuration."""
        self.telegram_bot_token = telegram_bot_token or None
        self.email_api_key = email_api_key or None
        self.public_site_url = public_site_url or None
        self.log_level = log_level
        self.database_url = database_url or "sqlite:///./data/job_notifier.db"
        self.environment = environment or "local"

    def to_settings(self, default_public_url: str) -> NotifierSettings:
        """Build the pipeline's explicit settings struct.

        Args:
            default_public_url: Site URL to use when PUBLIC_SITE_URL is unset

        Returns:
            NotifierSettings with channel credentials and deep-link base
        """
        return NotifierSettings(
            telegram_bot_token=self.telegram_bot_token,
            email_api_key=self.email_api_key,
            public_site_url=self.public_site_url or default_public_url,
        )


def load_environment_config() -> EnvironmentConfig:
    """
    Load and validate environment variables.

    All variables are optional:
    - TELEGRAM_BOT_TOKEN: Enables the Telegram channel
    - RESEND_API_KEY: Enables the email channel
    - PUBLIC_SITE_URL: Base URL for job deep links
    - DATABASE_URL: SQLAlchemy URL (default: sqlite:///./data/job_notifier.db)
    - LOG_LEVEL: Override log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    - ENVIRONMENT: Environment label used in logs (default: local)

    Returns:
        EnvironmentConfig object with validated values

    Raises:
        ConfigurationError: If a variable is present but invalid
    """
    errors = []

    telegram_bot_token = os.getenv("TELEGRAM_BOT_TOKEN")
    email_api_key = os.getenv("RESEND_API_KEY")
    public_site_url = os.getenv("PUBLIC_SITE_URL")
    database_url = os.getenv("DATABASE_URL")
    log_level = os.getenv("LOG_LEVEL")
    environment = os.getenv("ENVIRONMENT")

    if public_site_url:
        public_site_url = public_site_url.strip()
        if not public_site_url.startswith(("http://", "https://")):
            errors.append(
                f"Invalid PUBLIC_SITE_URL: '{public_site_url}'. Must start with http:// or https://"
            )

    if log_level:
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if log_level.upper() not in valid_levels:
            errors.append(
                f"Invalid LOG_LEVEL: '{log_level}'. Must be one of: {', '.join(valid_levels)}"
            )

    if database_url is not None and not database_url.strip():
        errors.append("DATABASE_URL is set but empty")

    if errors:
        raise ConfigurationError(
            "Environment variable validation failed",
            errors=errors,
            suggestions=[
                "Copy .env.example to .env and fill in your credentials",
                "Use a full URL such as https://zehulu.jobs for PUBLIC_SITE_URL",
                "Unset variables you do not need; all of them are optional",
            ],
        )

    return EnvironmentConfig(
        telegram_bot_token=telegram_bot_token.strip() if telegram_bot_token else None,
        email_api_key=email_api_key.strip() if email_api_key else None,
        public_site_url=public_site_url,
        log_level=log_level.upper() if log_level else None,
        database_url=database_url,
        environment=environment,
    )
