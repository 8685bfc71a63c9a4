"""Core domain models for job postings, subscribers, and notifications.

This module defines the data structures used throughout the application:
- JobPosting: the newly created job that triggers a notification run
- SubscriberProfile: a job seeker's notification preferences and channel opt-ins
- NotificationRecord: an in-app notification row (one per matched subscriber)
- TelegramDispatch / EmailDispatch: transient outbound payloads, never persisted
"""

from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class JobPosting(BaseModel):
    """Newly created job posting that triggers the notification pipeline.

    Optional attributes default to an empty string, so templates and the
    matching predicate can treat "not specified" uniformly.
    """

    job_id: str = Field(..., description="Job identifier")
    job_title: str = Field(..., description="Job title")
    company_name: str = Field(..., description="Employer / company name")
    city: str = Field(..., description="City where the job is located")
    category: str = Field("", description="Job category")
    job_type: str = Field("", description="Job type (Full-time, Contract, ...)")
    experience_level: str = Field("", description="Required experience level")
    description: str = Field("", description="Free-text job description")

    @field_validator("job_id", "job_title", "company_name", "city")
    @classmethod
    def strip_required(cls, v: str) -> str:
        """Strip whitespace from required fields."""
        if not v or not v.strip():
            raise ValueError("Field cannot be empty or whitespace-only")
        return v.strip()

    @field_validator("category", "job_type", "experience_level", "description", mode="before")
    @classmethod
    def default_optional(cls, v: Optional[str]) -> str:
        """Treat null optional fields as empty strings."""
        if v is None:
            return ""
        return v

    model_config = {
        "frozen": True,
        # Callers may send numeric ids
        "coerce_numbers_to_str": True,
        "json_schema_extra": {
            "example": {
                "job_id": "5f0c6a4e-8a1b-4c55-9d0e-0a2b3c4d5e6f",
                "job_title": "Driver",
                "company_name": "Selam Transport",
                "city": "Addis Ababa",
                "category": "Transport",
                "job_type": "Full-time",
                "experience_level": "Mid Level",
                "description": "We are hiring an experienced driver...",
            }
        },
    }


class SubscriberProfile(BaseModel):
    """Job seeker profile with notifications globally enabled.

    Preference lists use "empty list = no restriction" semantics for the
    corresponding dimension.
    """

    user_id: str = Field(..., description="User identifier")
    telegram_user_id: Optional[str] = Field(None, description="Telegram chat id")
    full_name: Optional[str] = Field(None, description="Display name")
    notification_categories: List[str] = Field(default_factory=list)
    notification_locations: List[str] = Field(default_factory=list)
    notification_keywords: List[str] = Field(default_factory=list)
    notification_job_types: List[str] = Field(default_factory=list)
    notification_experience_levels: List[str] = Field(default_factory=list)
    notification_enabled: bool = Field(True, description="Global notification toggle")
    email_notifications: bool = Field(True, description="Email channel opt-in")
    telegram_notifications: bool = Field(False, description="Telegram channel opt-in")

    @field_validator(
        "notification_categories",
        "notification_locations",
        "notification_keywords",
        "notification_job_types",
        "notification_experience_levels",
        mode="before",
    )
    @classmethod
    def null_list_is_empty(cls, v):
        """Read NULL preference columns as empty lists."""
        if v is None:
            return []
        return v

    @field_validator("telegram_user_id", "full_name", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        """Normalise blank optional strings to None."""
        if v is None:
            return None
        v = str(v).strip()
        return v or None

    @property
    def wants_telegram(self) -> bool:
        """Whether a Telegram message should be composed for this subscriber."""
        return self.telegram_notifications and self.telegram_user_id is not None


class NotificationRecord(BaseModel):
    """In-app notification row, created once per matched subscriber."""

    user_id: str = Field(..., description="Recipient user identifier")
    job_id: str = Field(..., description="Job this notification refers to")
    title: str = Field(..., description="Localized notification title")
    message: str = Field(..., description="Localized notification message")
    is_read: bool = Field(False, description="Read flag, unread on creation")
    id: Optional[str] = Field(None, description="Row identifier (assigned on insert)")
    created_at: Optional[datetime] = Field(None, description="Creation time (UTC)")

    @field_validator("created_at")
    @classmethod
    def ensure_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        """Ensure datetime is timezone-aware and in UTC."""
        if v is None:
            return None
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)


class TelegramDispatch(BaseModel):
    """Transient Telegram payload: chat id plus message text."""

    chat_id: str
    text: str
    user_id: Optional[str] = None


class EmailDispatch(BaseModel):
    """Transient email payload: address, subject and HTML body."""

    to: str
    subject: str
    html: str
    name: str = "Job Seeker"
    user_id: Optional[str] = None
