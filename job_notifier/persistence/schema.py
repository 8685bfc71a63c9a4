"""Database schema definition and ORM models.

This module defines SQLAlchemy ORM models for the database schema and provides
conversion methods between ORM models and domain models.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import JSON, Boolean, Column, Index, String, Text, inspect
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base

from job_notifier.domain.models import NotificationRecord, SubscriberProfile
from job_notifier.utils.timestamps import ensure_utc, utc_now

logger = logging.getLogger(__name__)

Base = declarative_base()

JOB_SEEKER = "job_seeker"
EMPLOYER = "employer"


class ProfileModel(Base):
    """ORM model for the profiles table.

    Only the columns the notification pipeline reads are mapped.
    """

    __tablename__ = "profiles"

    user_id = Column(String(64), primary_key=True, nullable=False)
    user_type = Column(String(32), nullable=False, default=JOB_SEEKER)
    full_name = Column(String(255), nullable=True)
    telegram_user_id = Column(String(64), nullable=True)
    location = Column(String(255), nullable=True)

    # Preference lists (NULL is read as "no restriction")
    notification_categories = Column(JSON, nullable=True)
    notification_locations = Column(JSON, nullable=True)
    notification_keywords = Column(JSON, nullable=True)
    notification_job_types = Column(JSON, nullable=True)
    notification_experience_levels = Column(JSON, nullable=True)

    # Channel toggles
    notification_enabled = Column(Boolean, nullable=False, default=True)
    email_notifications = Column(Boolean, nullable=False, default=True)
    telegram_notifications = Column(Boolean, nullable=False, default=False)

    __table_args__ = (
        Index("idx_profiles_subscribers", "user_type", "notification_enabled"),
    )

    def to_domain(self) -> SubscriberProfile:
        """Convert ORM model to domain model."""
        return SubscriberProfile(
            user_id=self.user_id,
            telegram_user_id=self.telegram_user_id,
            full_name=self.full_name,
            notification_categories=self.notification_categories,
            notification_locations=self.notification_locations,
            notification_keywords=self.notification_keywords,
            notification_job_types=self.notification_job_types,
            notification_experience_levels=self.notification_experience_levels,
            notification_enabled=bool(self.notification_enabled),
            email_notifications=bool(self.email_notifications),
            telegram_notifications=bool(self.telegram_notifications),
        )

    @classmethod
    def from_domain(
        cls, profile: SubscriberProfile, user_type: str = JOB_SEEKER
    ) -> "ProfileModel":
        """Create ORM model from domain model."""
        model = cls(user_id=profile.user_id, user_type=user_type)
        model.apply(profile)
        return model

    def apply(self, profile: SubscriberProfile) -> None:
        """Copy preference and channel fields from a domain profile."""
        self.full_name = profile.full_name
        self.telegram_user_id = profile.telegram_user_id
        self.notification_categories = list(profile.notification_categories)
        self.notification_locations = list(profile.notification_locations)
        self.notification_keywords = list(profile.notification_keywords)
        self.notification_job_types = list(profile.notification_job_types)
        self.notification_experience_levels = list(profile.notification_experience_levels)
        self.notification_enabled = profile.notification_enabled
        self.email_notifications = profile.email_notifications
        self.telegram_notifications = profile.telegram_notifications


class NotificationModel(Base):
    """ORM model for the notifications table (in-app notifications)."""

    __tablename__ = "notifications"

    id = Column(String(32), primary_key=True, nullable=False)
    user_id = Column(String(64), nullable=False)
    job_id = Column(String(64), nullable=False)
    title = Column(Text, nullable=False)
    message = Column(Text, nullable=False)
    is_read = Column(Boolean, nullable=False, default=False)
    created_at = Column(String(50), nullable=False)

    __table_args__ = (
        Index("idx_notifications_user", "user_id", "is_read"),
        Index("idx_notifications_job", "job_id"),
    )

    def to_domain(self) -> NotificationRecord:
        """Convert ORM model to domain model."""
        return NotificationRecord(
            id=self.id,
            user_id=self.user_id,
            job_id=self.job_id,
            title=self.title,
            message=self.message,
            is_read=bool(self.is_read),
            created_at=_parse_datetime(self.created_at),
        )

    @classmethod
    def from_domain(cls, record: NotificationRecord) -> "NotificationModel":
        """Create ORM model from domain model, assigning id and timestamp if unset."""
        return cls(
            id=record.id or uuid.uuid4().hex,
            user_id=record.user_id,
            job_id=record.job_id,
            title=record.title,
            message=record.message,
            is_read=record.is_read,
            created_at=_format_datetime(record.created_at or utc_now()),
        )


class UserModel(Base):
    """ORM model for the users table (identity provider directory)."""

    __tablename__ = "users"

    user_id = Column(String(64), primary_key=True, nullable=False)
    email = Column(String(320), nullable=True)


def _format_datetime(dt: Optional[datetime]) -> Optional[str]:
    """Format datetime as ISO 8601 UTC string for database storage."""
    if dt is None:
        return None
    return ensure_utc(dt).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


def _parse_datetime(dt_str: Optional[str]) -> Optional[datetime]:
    """Parse an ISO 8601 string written by _format_datetime."""
    if not dt_str:
        return None

    dt_str = dt_str.rstrip("Z")

    try:
        dt = datetime.strptime(dt_str, "%Y-%m-%dT%H:%M:%S.%f")
    except ValueError:
        dt = datetime.strptime(dt_str, "%Y-%m-%dT%H:%M:%S")

    return dt.replace(tzinfo=timezone.utc)


def create_schema(engine: Engine) -> None:
    """Create all tables and indexes if they don't exist (idempotent)."""
    logger.info("Creating database schema if not exists")

    try:
        Base.metadata.create_all(engine, checkfirst=True)
        tables = inspect(engine).get_table_names()
        logger.info(f"Database schema ready. Tables: {', '.join(tables)}")
    except Exception as e:
        logger.error(f"Failed to create database schema: {e}", exc_info=True)
        raise
