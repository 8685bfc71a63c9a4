"""Tests for configuration loading and validation."""

import os
import warnings
from pathlib import Path
from unittest.mock import patch

import pytest

from job_notifier.config import (
    AppConfig,
    ConfigurationError,
    EnvironmentConfig,
    NotifierSettings,
    check_for_warnings,
    load_config,
    load_environment_config,
    parse_app_config,
    validate_config_file,
)

VALID_CONFIG = """
logging:
  level: DEBUG
  format: json

telegram:
  api_base_url: https://api.telegram.org/
  timeout: 10

email:
  sender: "Zehulu Jobs <notifications@zehulu.jobs>"
  description_preview_chars: 150

delivery:
  max_workers: 5

site:
  default_public_url: https://jobs.example.com/
"""


@pytest.fixture
def clean_env():
    """Run with none of the notifier variables set."""
    keys = [
        "TELEGRAM_BOT_TOKEN",
        "RESEND_API_KEY",
        "PUBLIC_SITE_URL",
        "DATABASE_URL",
        "LOG_LEVEL",
        "ENVIRONMENT",
    ]
    with patch.dict(os.environ, {}, clear=False):
        for key in keys:
            os.environ.pop(key, None)
        yield


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(VALID_CONFIG, encoding="utf-8")
    return path


class TestAppConfig:
    def test_defaults(self):
        config = AppConfig()
        assert config.logging.level == "INFO"
        assert config.logging.format == "key-value"
        assert config.telegram.parse_mode == "HTML"
        assert config.email.api_url == "https://api.resend.com/emails"
        assert config.email.sender == "Zehulu Jobs <notifications@zehulu.jobs>"
        assert config.email.description_preview_chars == 200
        assert config.delivery.max_workers == 10
        assert config.site.default_public_url == "https://zehulu.jobs"
        assert config.api.cors_allow_origin == "*"
        assert config.api.cors_allow_headers == "authorization, x-client-info, apikey, content-type"

    def test_parse_valid_mapping(self):
        config = parse_app_config(
            {"telegram": {"api_base_url": "https://tg.example.com/"}, "delivery": {"max_workers": 3}}
        )
        assert config.telegram.api_base_url == "https://tg.example.com"
        assert config.delivery.max_workers == 3

    def test_invalid_max_workers(self):
        with pytest.raises(ConfigurationError) as exc_info:
            parse_app_config({"delivery": {"max_workers": 0}})
        assert "delivery -> max_workers" in str(exc_info.value)

    def test_invalid_log_level(self):
        with pytest.raises(ConfigurationError) as exc_info:
            parse_app_config({"logging": {"level": "LOUD"}})
        assert "logging -> level" in str(exc_info.value)

    def test_invalid_api_url(self):
        with pytest.raises(ConfigurationError):
            parse_app_config({"email": {"api_url": "ftp://mail.example.com"}})

    def test_bound_reported_with_limit(self):
        with pytest.raises(ConfigurationError) as exc_info:
            parse_app_config({"delivery": {"max_workers": 500}})
        assert exc_info.value.errors == ["delivery -> max_workers must be at most 100, got 500"]

    def test_unknown_section_rejected(self):
        with pytest.raises(ConfigurationError) as exc_info:
            parse_app_config({"telgram": {"timeout": 10}, "delivery": {"max_workers": 0}})
        errors = exc_info.value.errors
        assert "Unknown section 'telgram'" in errors
        assert any("delivery -> max_workers" in e for e in errors)

    def test_wrong_type_reported(self):
        with pytest.raises(ConfigurationError) as exc_info:
            parse_app_config({"telegram": {"timeout": "soon"}})
        assert exc_info.value.errors


class TestNotifierSettings:
    def test_channels_enabled_by_credentials(self):
        settings = NotifierSettings(telegram_bot_token="123:abc", email_api_key="re_key")
        assert settings.telegram_enabled
        assert settings.email_enabled

    def test_blank_credentials_disable_channels(self):
        settings = NotifierSettings(telegram_bot_token="  ", email_api_key="")
        assert not settings.telegram_enabled
        assert not settings.email_enabled

    def test_repr_hides_secrets(self):
        settings = NotifierSettings(telegram_bot_token="123:secret-token", email_api_key="re_secret")
        text = repr(settings)
        assert "secret" not in text
        assert "telegram_enabled=True" in text

    def test_public_site_url_trailing_slash_stripped(self):
        assert NotifierSettings(public_site_url="https://zehulu.jobs/").public_site_url == "https://zehulu.jobs"


class TestEnvironmentConfig:
    def test_all_optional(self, clean_env):
        env = load_environment_config()
        assert env.telegram_bot_token is None
        assert env.email_api_key is None
        assert env.public_site_url is None
        assert env.database_url == "sqlite:///./data/job_notifier.db"
        assert env.environment == "local"

    def test_reads_variables(self, clean_env):
        with patch.dict(
            os.environ,
            {
                "TELEGRAM_BOT_TOKEN": " 123:abc ",
                "RESEND_API_KEY": "re_key",
                "PUBLIC_SITE_URL": "https://jobs.example.com",
                "DATABASE_URL": "sqlite:///:memory:",
                "LOG_LEVEL": "debug",
                "ENVIRONMENT": "production",
            },
        ):
            env = load_environment_config()

        assert env.telegram_bot_token == "123:abc"
        assert env.email_api_key == "re_key"
        assert env.public_site_url == "https://jobs.example.com"
        assert env.database_url == "sqlite:///:memory:"
        assert env.log_level == "DEBUG"
        assert env.environment == "production"

    def test_invalid_values_collected(self, clean_env):
        with patch.dict(
            os.environ,
            {"PUBLIC_SITE_URL": "zehulu.jobs", "LOG_LEVEL": "VERBOSE", "DATABASE_URL": " "},
        ):
            with pytest.raises(ConfigurationError) as exc_info:
                load_environment_config()

        assert len(exc_info.value.errors) == 3
        assert "PUBLIC_SITE_URL" in exc_info.value.errors[0]

    def test_to_settings_uses_default_url(self):
        env = EnvironmentConfig(telegram_bot_token="t")
        settings = env.to_settings("https://zehulu.jobs")
        assert settings.public_site_url == "https://zehulu.jobs"
        assert settings.telegram_enabled
        assert not settings.email_enabled

    def test_to_settings_prefers_env_url(self):
        env = EnvironmentConfig(public_site_url="https://staging.zehulu.jobs/")
        assert env.to_settings("https://zehulu.jobs").public_site_url == "https://staging.zehulu.jobs"


class TestLoadConfig:
    def test_load_valid_file(self, config_file, clean_env):
        with warnings.catch_warnings():
            warnings.simplefilter("ignore")
            app_config, env_config = load_config(config_file)

        assert app_config.logging.level == "DEBUG"
        assert app_config.logging.format == "json"
        assert app_config.telegram.api_base_url == "https://api.telegram.org"
        assert app_config.email.description_preview_chars == 150
        assert app_config.site.default_public_url == "https://jobs.example.com"
        assert isinstance(env_config, EnvironmentConfig)

    def test_missing_explicit_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            load_config(tmp_path / "missing.yaml")

    def test_fallback_to_config_directory(self, tmp_path, monkeypatch, clean_env):
        (tmp_path / "config").mkdir()
        (tmp_path / "config" / "config.yaml").write_text(VALID_CONFIG, encoding="utf-8")
        monkeypatch.chdir(tmp_path)

        with warnings.catch_warnings():
            warnings.simplefilter("ignore")
            app_config, _ = load_config()

        assert app_config.delivery.max_workers == 5

    def test_no_config_anywhere(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        with pytest.raises(ConfigurationError) as exc_info:
            load_config()
        assert "Tried: config.yaml" in exc_info.value.errors

    def test_empty_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="empty"):
            load_config(path)

    def test_non_mapping_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("- just\n- a list\n", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="mapping"):
            load_config(path)

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("logging: [unclosed\n", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="YAML"):
            load_config(path)

    def test_missing_credentials_emit_warnings(self, config_file, clean_env):
        with pytest.warns(UserWarning, match="TELEGRAM_BOT_TOKEN is not set"):
            load_config(config_file)


class TestWarnings:
    def test_large_worker_pool(self):
        messages = check_for_warnings({"delivery": {"max_workers": 80}})
        assert any("max_workers" in m for m in messages)

    def test_zero_preview(self):
        messages = check_for_warnings({"email": {"description_preview_chars": 0}})
        assert any("description_preview_chars" in m for m in messages)

    def test_no_warnings_for_complete_setup(self):
        env = EnvironmentConfig(telegram_bot_token="t", email_api_key="k")
        assert check_for_warnings({"delivery": {"max_workers": 10}}, env) == []

    def test_missing_email_key(self):
        env = EnvironmentConfig(telegram_bot_token="t")
        messages = check_for_warnings({}, env)
        assert messages == ["RESEND_API_KEY is not set; email notifications are disabled"]


class TestConfigurationError:
    def test_formats_errors_and_suggestions(self):
        error = ConfigurationError("Bad config", errors=["one", "two"], suggestions=["fix it"])
        text = str(error)
        assert "Bad config" in text
        assert "1. one" in text
        assert "2. two" in text
        assert "- fix it" in text

    def test_add_error_refreshes_message(self):
        error = ConfigurationError("Bad config")
        error.add_error("late problem")
        assert "late problem" in str(error)


class TestValidateConfigFile:
    def test_valid(self, config_file, capsys):
        assert validate_config_file(config_file) is True
        assert "is valid" in capsys.readouterr().out

    def test_invalid(self, tmp_path, capsys):
        path = tmp_path / "config.yaml"
        path.write_text("delivery:\n  max_workers: -1\n", encoding="utf-8")
        assert validate_config_file(path) is False

    def test_unreadable(self, tmp_path):
        assert validate_config_file(Path(tmp_path / "nope.yaml")) is False
