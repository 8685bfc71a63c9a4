"""Main entry point for the job notification service."""

from dotenv import load_dotenv
load_dotenv()

import argparse
import json
import sys
import time
from pathlib import Path
from typing import Optional, Tuple

import yaml
from pydantic import ValidationError

from job_notifier.config.environment import EnvironmentConfig
from job_notifier.config.exceptions import ConfigurationError
from job_notifier.config.loader import load_config, validate_config_file
from job_notifier.config.models import AppConfig
from job_notifier.domain.models import JobPosting, SubscriberProfile
from job_notifier.logging import get_logger
from job_notifier.logging.config import configure_logging
from job_notifier.persistence.database import close_database, get_session, init_database
from job_notifier.persistence.repositories import IdentityRepository, ProfileRepository
from job_notifier.persistence.schema import JOB_SEEKER
from job_notifier.pipeline import NotificationPipeline, PipelineError, build_pipeline

logger = get_logger(__name__, component="cli")


def load_runtime_config(
    config_path: Optional[Path], log_level_override: Optional[str]
) -> Tuple[AppConfig, EnvironmentConfig]:
    """
    Load configuration and resolve the effective log level.

    Log level priority: CLI > Environment > Config file > INFO.

    Raises:
        ConfigurationError: If configuration is invalid
    """
    app_config, env_config = load_config(config_path)

    if log_level_override:
        env_config.log_level = log_level_override
    elif env_config.log_level:
        pass
    elif app_config.logging and app_config.logging.level:
        env_config.log_level = app_config.logging.level
    else:
        env_config.log_level = "INFO"

    return app_config, env_config


def bootstrap(
    config_path: Optional[Path] = None, log_level_override: Optional[str] = None
) -> Tuple[AppConfig, NotificationPipeline]:
    """
    Load configuration, configure logging, open the database and wire the pipeline.

    Raises:
        ConfigurationError: If configuration is invalid
    """
    app_config, env_config = load_runtime_config(config_path, log_level_override)

    configure_logging(
        level=env_config.log_level,
        format_type=app_config.logging.format,
        environment=env_config.environment,
    )
    init_database(env_config.database_url)

    logger.info(
        "Configuration loaded",
        extra={
            "event": "config.loaded",
            "log_level": env_config.log_level,
            "log_format": app_config.logging.format,
            "max_workers": app_config.delivery.max_workers,
        },
    )

    return app_config, build_pipeline(app_config, env_config)


def run_serve(args: argparse.Namespace) -> int:
    import uvicorn

    from job_notifier.api import create_app

    app_config, pipeline = bootstrap(args.config, args.log_level)
    app = create_app(pipeline, app_config.api)

    logger.info(
        f"Serving on {args.host}:{args.port}",
        extra={"event": "service.starting", "host": args.host, "port": args.port},
    )
    try:
        # log_config=None keeps the handlers installed by configure_logging
        uvicorn.run(app, host=args.host, port=args.port, log_config=None)
    finally:
        pipeline.notification_service.close()
        close_database()
    return 0


def run_notify(args: argparse.Namespace) -> int:
    _, pipeline = bootstrap(args.config, args.log_level)

    try:
        with open(args.payload, "r", encoding="utf-8") as f:
            payload = json.load(f)
        job = JobPosting(**payload)
    except (OSError, ValueError, TypeError) as e:
        # ValidationError is a ValueError
        print(f"Invalid job payload {args.payload}: {e}", file=sys.stderr)
        close_database()
        return 1

    try:
        result = pipeline.run(job)
    except PipelineError as e:
        print(json.dumps({"error": e.message}), file=sys.stderr)
        return 1
    finally:
        pipeline.notification_service.close()
        close_database()

    print(json.dumps(result.to_response(), ensure_ascii=False, indent=2))
    return 0


def run_seed(args: argparse.Namespace) -> int:
    """Load subscriber profiles and user emails from a YAML fixture file."""
    app_config, env_config = load_runtime_config(args.config, args.log_level)
    configure_logging(
        level=env_config.log_level,
        format_type=app_config.logging.format,
        environment=env_config.environment,
    )
    init_database(env_config.database_url)

    try:
        with open(args.profiles, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        print(f"Failed to read {args.profiles}: {e}", file=sys.stderr)
        close_database()
        return 1

    entries = data.get("profiles", []) if isinstance(data, dict) else []
    seeded = 0
    try:
        with get_session() as session:
            profiles = ProfileRepository(session)
            identities = IdentityRepository(session)
            for index, entry in enumerate(entries):
                entry = dict(entry)
                email = entry.pop("email", None)
                user_type = entry.pop("user_type", JOB_SEEKER)
                try:
                    profile = SubscriberProfile(**entry)
                except ValidationError as e:
                    raise ConfigurationError(
                        f"Invalid profile at index {index} in {args.profiles}",
                        errors=[str(err["msg"]) for err in e.errors()],
                    ) from e
                profiles.upsert(profile, user_type=user_type)
                identities.upsert(profile.user_id, email)
                seeded += 1
    finally:
        close_database()

    logger.info(
        f"Seeded {seeded} profiles from {args.profiles}",
        extra={"event": "seed.completed", "count": seeded},
    )
    return 0


def run_check_config(args: argparse.Namespace) -> int:
    config_path = args.config or Path("config.yaml")
    return 0 if validate_config_file(config_path) else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Job Notifier - matches new job postings to subscribers and sends alerts"
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to configuration file (default: config.yaml or config/config.yaml)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Log level (overrides config and environment)",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    serve = commands.add_parser("serve", help="Run the HTTP service")
    serve.add_argument("--host", default="0.0.0.0", help="Bind address (default: 0.0.0.0)")
    serve.add_argument("--port", type=int, default=8000, help="Bind port (default: 8000)")
    serve.set_defaults(handler=run_serve)

    notify = commands.add_parser("notify", help="Run the pipeline once for a job payload")
    notify.add_argument("payload", type=Path, help="JSON file with the job posting")
    notify.set_defaults(handler=run_notify)

    seed = commands.add_parser("seed", help="Load subscriber profiles from a YAML file")
    seed.add_argument("profiles", type=Path, help="YAML file with a 'profiles' list")
    seed.set_defaults(handler=run_seed)

    check = commands.add_parser(
        "check-config", help="Validate the YAML configuration file and exit"
    )
    check.set_defaults(handler=run_check_config)

    return parser


def main(argv=None) -> int:
    """
    Main entry point.

    Returns:
        Exit code (0 for success, non-zero for failure).
    """
    start_time = time.time()
    args = build_parser().parse_args(argv)

    try:
        exit_code = args.handler(args)
    except ConfigurationError as e:
        # Configuration errors are already formatted nicely
        print(f"Configuration Error: {e}", file=sys.stderr)
        logger.error(
            f"Configuration error: {e}",
            extra={"event": "config.error", "error_type": "ConfigurationError"},
        )
        return 1
    except KeyboardInterrupt:
        print("\nShutdown requested by user", file=sys.stderr)
        return 0
    except Exception as e:
        print(f"Fatal error: {e}", file=sys.stderr)
        logger.critical(
            "Fatal error",
            extra={
                "event": "service.failed",
                "error_type": type(e).__name__,
                "error": str(e),
            },
            exc_info=True,
        )
        return 1

    logger.info(
        f"Command {args.command} finished",
        extra={
            "event": "service.stopping",
            "command": args.command,
            "uptime_seconds": round(time.time() - start_time, 2),
        },
    )
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
