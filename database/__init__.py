from database.connection import DatabasePool, db
from database.db_manager import DatabaseManager
from database.repositories import (
    CourseRepositoryDB,
    InsightRepositoryDB,
    ProfileRepositoryDB,
    RoundRepositoryDB,
)
from database.exceptions import (
    DRIVER_ERRORS,
    DatabaseError,
    DuplicateError,
    NotFoundError,
    PersistenceError,
)

__all__ = [
    "DatabasePool",
    "db",
    "DatabaseManager",
    "CourseRepositoryDB",
    "InsightRepositoryDB",
    "ProfileRepositoryDB",
    "RoundRepositoryDB",
    "DRIVER_ERRORS",
    "DatabaseError",
    "DuplicateError",
    "NotFoundError",
    "PersistenceError",
]
