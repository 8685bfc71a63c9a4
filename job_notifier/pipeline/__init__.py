"""Pipeline orchestration for job notification runs."""

from .models import PERSIST_NOTIFICATIONS, READ_PROFILES, PipelineError, PipelineRunResult
from .runner import NotificationPipeline, build_pipeline, lookup_email

__all__ = [
    "NotificationPipeline",
    "PipelineRunResult",
    "PipelineError",
    "READ_PROFILES",
    "PERSIST_NOTIFICATIONS",
    "build_pipeline",
    "lookup_email",
]
