"""Configuration management module for the job notifier."""

from .environment import EnvironmentConfig, load_environment_config
from .exceptions import ConfigurationError
from .loader import load_config, parse_app_config, validate_config_file
from .models import (
    ApiConfig,
    AppConfig,
    DeliveryConfig,
    EmailConfig,
    LogFormat,
    LoggingConfig,
    LogLevel,
    NotifierSettings,
    SiteConfig,
    TelegramConfig,
)
from .validators import check_for_warnings, emit_warnings

__all__ = [
    # Main loader functions
    "load_config",
    "parse_app_config",
    "validate_config_file",
    "load_environment_config",
    "check_for_warnings",
    "emit_warnings",
    # Configuration models
    "AppConfig",
    "LoggingConfig",
    "TelegramConfig",
    "EmailConfig",
    "DeliveryConfig",
    "SiteConfig",
    "ApiConfig",
    "EnvironmentConfig",
    "NotifierSettings",
    # Enums
    "LogLevel",
    "LogFormat",
    # Exceptions
    "ConfigurationError",
]
