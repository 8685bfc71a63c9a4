"""Additional validation utilities for configuration."""

import warnings
from typing import Any, Dict, List, Optional

from .environment import EnvironmentConfig


def check_for_warnings(
    config_dict: Dict[str, Any], env_config: Optional[EnvironmentConfig] = None
) -> List[str]:
    """
    Check configuration for potential issues and return warnings.

    Args:
        config_dict: Raw configuration dictionary
        env_config: Loaded environment configuration, if available

    Returns:
        List of warning messages
    """
    warning_messages = []

    # Large pools mostly just hit provider rate limits
    delivery = config_dict.get("delivery", {})
    if isinstance(delivery, dict):
        max_workers = delivery.get("max_workers", 10)
        if isinstance(max_workers, int) and max_workers > 50:
            warning_messages.append(
                f"Large delivery.max_workers ({max_workers}) may trigger provider rate limits"
            )

    email = config_dict.get("email", {})
    if isinstance(email, dict):
        preview = email.get("description_preview_chars", 200)
        if isinstance(preview, int) and preview == 0:
            warning_messages.append(
                "email.description_preview_chars is 0; job descriptions will be omitted from emails"
            )

    if env_config is not None:
        if not env_config.telegram_bot_token:
            warning_messages.append(
                "TELEGRAM_BOT_TOKEN is not set; Telegram notifications are disabled"
            )
        if not env_config.email_api_key:
            warning_messages.append(
                "RESEND_API_KEY is not set; email notifications are disabled"
            )

    return warning_messages


def emit_warnings(warning_messages: List[str]) -> None:
    """
    Emit warning messages using Python's warnings module.

    Args:
        warning_messages: List of warning messages to emit
    """
    for message in warning_messages:
        warnings.warn(message, UserWarning, stacklevel=2)
