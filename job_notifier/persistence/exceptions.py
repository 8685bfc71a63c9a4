"""Persistence layer exceptions.

All data-store failures surface as PersistenceError subclasses so the
pipeline can tell a failed profile read or batch insert apart from
delivery problems.
"""


class PersistenceError(Exception):
    """Base exception for all persistence layer errors."""

    pass


class DatabaseConnectionError(PersistenceError):
    """Raised when the database cannot be initialised or is not initialised yet."""

    pass


class RecordNotFoundError(PersistenceError):
    """Raised when an operation needs a row that does not exist.

    Optional lookups return None instead.
    """

    pass


class DataIntegrityError(PersistenceError):
    """Raised on constraint violations (duplicate primary key, NOT NULL, ...)."""

    pass
