from typing import Optional

import asyncpg


class DatabaseError(Exception):
    """Base for all database errors."""


class NotFoundError(DatabaseError):
    """Entity not found."""


class DuplicateError(DatabaseError):
    """Unique constraint violation."""


class PersistenceError(DatabaseError):
    """A write to the store failed."""

    def __init__(self, message: str, *, hole_number: Optional[int] = None):
        super().__init__(message)
        self.hole_number = hole_number


# Driver-level failures a repository call can surface (server errors,
# closed/invalid connections, network errors).
DRIVER_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError)
