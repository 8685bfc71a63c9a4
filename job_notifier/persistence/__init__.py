"""Persistence layer for the profile store, in-app notifications and identities.

Public API:
    # Database initialization and session management
    - init_database(database_url: str) -> None
    - get_session() -> ContextManager[Session]
    - close_database() -> None
    - get_engine() -> Engine

    # Repository classes
    - ProfileRepository: subscriber preference reads (and seeding)
    - NotificationRepository: batch insert and read-flag updates
    - IdentityRepository: email lookup by user id

Example usage:
    >>> from job_notifier.persistence import init_database, get_session, ProfileRepository
    >>> init_database("sqlite:///./data/job_notifier.db")
    >>> with get_session() as session:
    ...     subscribers = ProfileRepository(session).list_notification_subscribers()
"""

from .database import close_database, get_engine, get_session, init_database, is_initialized
from .exceptions import (
    DatabaseConnectionError,
    DataIntegrityError,
    PersistenceError,
    RecordNotFoundError,
)
from .repositories import IdentityRepository, NotificationRepository, ProfileRepository

__all__ = [
    # Database functions
    "init_database",
    "get_session",
    "close_database",
    "get_engine",
    "is_initialized",
    # Repositories
    "ProfileRepository",
    "NotificationRepository",
    "IdentityRepository",
    # Exceptions
    "PersistenceError",
    "DatabaseConnectionError",
    "RecordNotFoundError",
    "DataIntegrityError",
]
