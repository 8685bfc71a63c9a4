"""HTTP surface for the notification pipeline.

The job-management side calls POST /send-job-notifications once per newly
created job. The module-level ``app`` is built from config.yaml and the
environment on first access, so ``uvicorn job_notifier.api:app`` works
without going through the CLI.
"""

import json
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response
from pydantic import ValidationError
from starlette.concurrency import run_in_threadpool

from job_notifier.config.models import ApiConfig
from job_notifier.domain.models import JobPosting
from job_notifier.logging import get_logger
from job_notifier.pipeline import NotificationPipeline, PipelineError

logger = get_logger(__name__, component="api")

NOTIFY_PATH = "/send-job-notifications"


def create_app(pipeline: NotificationPipeline, api_config: Optional[ApiConfig] = None) -> FastAPI:
    """Build the FastAPI application around a wired pipeline."""
    api_config = api_config or ApiConfig()
    cors_headers = {
        "Access-Control-Allow-Origin": api_config.cors_allow_origin,
        "Access-Control-Allow-Headers": api_config.cors_allow_headers,
    }

    app = FastAPI(title="Job Notifier")
    app.state.pipeline = pipeline

    @app.middleware("http")
    async def add_cors_headers(request: Request, call_next):
        response = await call_next(request)
        for name, value in cors_headers.items():
            response.headers.setdefault(name, value)
        return response

    @app.options(NOTIFY_PATH)
    def preflight() -> Response:
        return Response(status_code=200)

    @app.post(NOTIFY_PATH)
    async def send_job_notifications(request: Request) -> JSONResponse:
        job_or_error = _parse_job(await request.body())
        if isinstance(job_or_error, JSONResponse):
            return job_or_error
        job = job_or_error

        try:
            result = await run_in_threadpool(pipeline.run, job)
        except PipelineError as e:
            logger.error(
                f"Notification run failed at {e.stage}: {e.message}",
                extra={"event": "api.notify.failed", "job_id": job.job_id, "stage": e.stage},
            )
            return JSONResponse(status_code=500, content={"error": e.message})
        except Exception as e:
            logger.critical(
                f"Unexpected error in notification run: {e}",
                exc_info=True,
                extra={"event": "api.notify.failed", "job_id": job.job_id},
            )
            return JSONResponse(status_code=500, content={"error": str(e)})

        return JSONResponse(status_code=200, content=result.to_response())

    @app.get("/health")
    def health() -> dict:
        return {
            "status": "ok",
            "telegram_enabled": pipeline.settings.telegram_enabled,
            "email_enabled": pipeline.settings.email_enabled,
        }

    return app


def _parse_job(body: bytes):
    """Parse the request body into a JobPosting, or a 400 response."""
    try:
        payload = json.loads(body or b"null")
    except ValueError:
        return _bad_request("Request body must be valid JSON")

    if not isinstance(payload, dict):
        return _bad_request("Request body must be a JSON object")

    try:
        return JobPosting(**{k: v for k, v in payload.items() if k in JobPosting.model_fields})
    except ValidationError as e:
        fields = sorted({str(err["loc"][0]) for err in e.errors() if err.get("loc")})
        return _bad_request(f"Invalid job payload: {', '.join(fields) or 'unknown field'}")


def _bad_request(message: str) -> JSONResponse:
    logger.warning(message, extra={"event": "api.request.invalid"})
    return JSONResponse(status_code=400, content={"error": message})


_app: Optional[FastAPI] = None


def get_app() -> FastAPI:
    """Build the application from config.yaml and the environment (once)."""
    global _app
    if _app is None:
        from job_notifier.main import bootstrap

        app_config, pipeline = bootstrap()
        _app = create_app(pipeline, app_config.api)
    return _app


def __getattr__(name: str):
    if name == "app":
        return get_app()
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
