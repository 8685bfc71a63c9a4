"""Configuration loader for the job notifier.

config.yaml only tunes the service (logging, provider endpoints, fan-out
size, deep-link base, CORS); every section has defaults. Credentials come
from the environment, never from the file.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import ValidationError

from .environment import EnvironmentConfig, load_environment_config
from .exceptions import ConfigurationError
from .models import AppConfig
from .validators import check_for_warnings, emit_warnings

DEFAULT_LOCATIONS = (Path("config.yaml"), Path("config") / "config.yaml")

_EXAMPLE_HINT = "Compare with config.example.yaml (sections: " + ", ".join(
    AppConfig.model_fields
) + ")"


def load_config(config_path: Optional[Path] = None) -> tuple[AppConfig, EnvironmentConfig]:
    """
    Load the YAML settings and the environment credentials.

    The file is taken from config_path when given, otherwise from the first
    of config.yaml and config/config.yaml that exists.

    Args:
        config_path: Optional path to configuration file

    Returns:
        Tuple of (AppConfig, EnvironmentConfig)

    Raises:
        ConfigurationError: If the file is missing, unreadable or invalid, or
            an environment variable is malformed
    """
    config_file = _find_config_file(config_path)
    config_dict = _read_yaml(config_file)

    if not config_dict:
        raise ConfigurationError(
            f"Configuration file is empty: {config_file}",
            suggestions=[
                "Copy config.example.yaml to config.yaml",
                "A single 'logging:' section is enough; other sections have defaults",
            ],
        )

    app_config = parse_app_config(config_dict)
    env_config = load_environment_config()

    warnings = check_for_warnings(config_dict, env_config)
    if warnings:
        emit_warnings(warnings)

    return app_config, env_config


def parse_app_config(config_dict: Dict[str, Any]) -> AppConfig:
    """Validate a parsed YAML mapping into an AppConfig.

    Unknown top-level sections, such as a misspelt ``telgram:``, are rejected.

    Args:
        config_dict: Parsed YAML mapping

    Returns:
        Validated AppConfig

    Raises:
        ConfigurationError: With one entry per problem found
    """
    if not isinstance(config_dict, dict):
        raise ConfigurationError(
            "Configuration file must contain a mapping at the top level",
            suggestions=[_EXAMPLE_HINT],
        )

    errors = [
        f"Unknown section '{key}'"
        for key in config_dict
        if key not in AppConfig.model_fields
    ]

    try:
        app_config = AppConfig.model_validate(config_dict)
    except ValidationError as e:
        errors.extend(_describe_errors(e))
        app_config = None

    if errors:
        raise ConfigurationError(
            "Configuration validation failed",
            errors=errors,
            suggestions=[
                _EXAMPLE_HINT,
                "Telegram and email credentials belong in the environment "
                "(TELEGRAM_BOT_TOKEN, RESEND_API_KEY), not in config.yaml",
            ],
        )

    return app_config


def _describe_errors(error: ValidationError) -> List[str]:
    """Turn pydantic errors into 'section -> field: problem' lines."""
    described = []
    for item in error.errors():
        field_path = " -> ".join(str(loc) for loc in item["loc"])
        error_type = item["type"]

        if error_type in ("greater_than_equal", "less_than_equal"):
            bound = item.get("ctx", {})
            limit = bound.get("ge", bound.get("le"))
            comparison = "at least" if error_type == "greater_than_equal" else "at most"
            described.append(f"{field_path} must be {comparison} {limit}, got {item.get('input')!r}")
        elif error_type.endswith("_parsing") or error_type.endswith("_type"):
            described.append(f"{field_path} has the wrong type: {item['msg']} (got {item.get('input')!r})")
        else:
            described.append(f"{field_path}: {item['msg']}")
    return described


def _read_yaml(config_file: Path) -> Any:
    try:
        with open(config_file, "r", encoding="utf-8") as f:
            return yaml.safe_load(f)
    except FileNotFoundError:
        raise ConfigurationError(
            f"Configuration file not found: {config_file}",
            suggestions=["Copy config.example.yaml to config.yaml"],
        )
    except yaml.YAMLError as e:
        raise ConfigurationError(
            f"Failed to parse YAML configuration {config_file}: {e}",
            suggestions=["Indent nested keys with spaces, not tabs"],
        )
    except OSError as e:
        raise ConfigurationError(
            f"Failed to read configuration file {config_file}: {e}",
        )


def _find_config_file(config_path: Optional[Path] = None) -> Path:
    """
    Resolve which configuration file to load.

    Args:
        config_path: Explicit path from --config, if any

    Returns:
        Path to an existing configuration file

    Raises:
        ConfigurationError: If no configuration file exists
    """
    if config_path:
        if not config_path.exists():
            raise ConfigurationError(
                f"Specified configuration file not found: {config_path}",
                suggestions=["Check the --config path"],
            )
        return config_path

    for candidate in DEFAULT_LOCATIONS:
        if candidate.exists():
            return candidate

    raise ConfigurationError(
        "Configuration file not found",
        errors=[f"Tried: {candidate}" for candidate in DEFAULT_LOCATIONS],
        suggestions=[
            "Copy config.example.yaml to config.yaml",
            "Use --config to point at another file",
        ],
    )


def validate_config_file(config_path: Path) -> bool:
    """
    Validate a configuration file without reading the environment.

    Backs the ``check-config`` command.

    Args:
        config_path: Path to configuration file

    Returns:
        True if valid, False otherwise (the outcome is printed to stdout)
    """
    try:
        parse_app_config(_read_yaml(config_path) or {})
    except ConfigurationError as e:
        print(f"✗ {config_path}: {e}")
        return False

    print(f"✓ Configuration file {config_path} is valid")
    return True
