"""Data access layer (repositories) for persistence operations.

Repositories wrap a caller-owned session, never commit themselves, and
return domain models rather than ORM models.
"""

import logging
from typing import List, Optional, Sequence

from pydantic import ValidationError
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from job_notifier.domain.models import NotificationRecord, SubscriberProfile

from .exceptions import DataIntegrityError, PersistenceError, RecordNotFoundError
from .schema import JOB_SEEKER, NotificationModel, ProfileModel, UserModel

logger = logging.getLogger(__name__)


class ProfileRepository:
    """Repository for job seeker profiles and their notification preferences."""

    def __init__(self, session: Session):
        self.session = session

    def list_notification_subscribers(self) -> List[SubscriberProfile]:
        """Load every job seeker with notifications globally enabled.

        Returns:
            List of SubscriberProfile domain models (empty list if none)

        Raises:
            PersistenceError: If the read fails
        """
        try:
            stmt = (
                select(ProfileModel)
                .where(
                    ProfileModel.user_type == JOB_SEEKER,
                    ProfileModel.notification_enabled.is_(True),
                )
                .order_by(ProfileModel.user_id)
            )
            models = self.session.execute(stmt).scalars().all()

        except SQLAlchemyError as e:
            logger.error(f"Error loading notification subscribers: {e}", exc_info=True)
            raise PersistenceError(f"Failed to load notification subscribers: {e}") from e

        profiles = []
        for model in models:
            try:
                profiles.append(model.to_domain())
            except ValidationError as e:
                # Corrupt rows are skipped, not fatal
                logger.warning(
                    f"Skipping malformed profile {model.user_id}: {e.error_count()} invalid field(s)",
                    extra={"event": "profile.malformed", "user_id": model.user_id},
                )
        return profiles

    def get(self, user_id: str) -> Optional[SubscriberProfile]:
        """Retrieve a profile by user id, or None if it does not exist."""
        try:
            model = self.session.get(ProfileModel, user_id)
            return model.to_domain() if model is not None else None
        except SQLAlchemyError as e:
            logger.error(f"Error retrieving profile {user_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to retrieve profile: {e}") from e

    def upsert(self, profile: SubscriberProfile, user_type: str = JOB_SEEKER) -> SubscriberProfile:
        """Insert a new profile or update preferences of an existing one.

        Raises:
            PersistenceError: If database error occurs
        """
        try:
            existing = self.session.get(ProfileModel, profile.user_id)
            if existing is not None:
                existing.user_type = user_type
                existing.apply(profile)
                self.session.flush()
                return existing.to_domain()

            model = ProfileModel.from_domain(profile, user_type=user_type)
            self.session.add(model)
            self.session.flush()
            return model.to_domain()

        except SQLAlchemyError as e:
            logger.error(f"Error upserting profile {profile.user_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to upsert profile: {e}") from e


class NotificationRepository:
    """Repository for in-app notification rows."""

    def __init__(self, session: Session):
        self.session = session

    def insert_batch(self, records: Sequence[NotificationRecord]) -> List[NotificationRecord]:
        """Insert all records in a single flush.

        Either every row is written or, on failure, none are: the caller's
        session is rolled back by get_session().

        Args:
            records: Notification records to insert

        Returns:
            Inserted records with id and created_at populated

        Raises:
            DataIntegrityError: On constraint violations
            PersistenceError: On any other database error
        """
        if not records:
            return []

        try:
            models = [NotificationModel.from_domain(record) for record in records]
            self.session.add_all(models)
            self.session.flush()
            return [model.to_domain() for model in models]

        except IntegrityError as e:
            logger.error(f"Integrity error inserting notifications: {e}", exc_info=True)
            raise DataIntegrityError(f"Failed to insert notifications: {e}") from e
        except SQLAlchemyError as e:
            logger.error(f"Error inserting notifications: {e}", exc_info=True)
            raise PersistenceError(f"Failed to insert notifications: {e}") from e

    def list_for_user(self, user_id: str, unread_only: bool = False) -> List[NotificationRecord]:
        """List a user's notifications, newest first."""
        try:
            stmt = select(NotificationModel).where(NotificationModel.user_id == user_id)
            if unread_only:
                stmt = stmt.where(NotificationModel.is_read.is_(False))
            stmt = stmt.order_by(NotificationModel.created_at.desc())
            return [m.to_domain() for m in self.session.execute(stmt).scalars().all()]
        except SQLAlchemyError as e:
            logger.error(f"Error listing notifications for {user_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to list notifications: {e}") from e

    def list_for_job(self, job_id: str) -> List[NotificationRecord]:
        """List every notification created for a job."""
        try:
            stmt = (
                select(NotificationModel)
                .where(NotificationModel.job_id == job_id)
                .order_by(NotificationModel.user_id)
            )
            return [m.to_domain() for m in self.session.execute(stmt).scalars().all()]
        except SQLAlchemyError as e:
            logger.error(f"Error listing notifications for job {job_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to list notifications: {e}") from e

    def count_unread(self, user_id: str) -> int:
        """Count a user's unread notifications (the bell badge)."""
        try:
            stmt = select(func.count()).select_from(NotificationModel).where(
                NotificationModel.user_id == user_id,
                NotificationModel.is_read.is_(False),
            )
            return int(self.session.execute(stmt).scalar_one())
        except SQLAlchemyError as e:
            logger.error(f"Error counting notifications for {user_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to count notifications: {e}") from e

    def mark_read(self, notification_id: str) -> NotificationRecord:
        """Set the read flag on one notification.

        Raises:
            RecordNotFoundError: If the notification does not exist
        """
        try:
            model = self.session.get(NotificationModel, notification_id)
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to load notification: {e}") from e

        if model is None:
            raise RecordNotFoundError(f"Notification not found: {notification_id}")

        model.is_read = True
        self.session.flush()
        return model.to_domain()


class IdentityRepository:
    """Lookup of account email addresses by user id."""

    def __init__(self, session: Session):
        self.session = session

    def get_email(self, user_id: str) -> Optional[str]:
        """Return the user's email address, or None if unknown or blank.

        Raises:
            PersistenceError: If the lookup fails
        """
        try:
            model = self.session.get(UserModel, user_id)
        except SQLAlchemyError as e:
            logger.error(f"Error resolving email for {user_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to resolve user email: {e}") from e

        if model is None or not model.email:
            return None
        return model.email.strip() or None

    def upsert(self, user_id: str, email: Optional[str]) -> None:
        """Create or update a user's email address."""
        try:
            existing = self.session.get(UserModel, user_id)
            if existing is not None:
                existing.email = email
            else:
                self.session.add(UserModel(user_id=user_id, email=email))
            self.session.flush()
        except SQLAlchemyError as e:
            logger.error(f"Error upserting user {user_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to upsert user: {e}") from e
