from .course_repo import CourseRepositoryDB
from .insight_repo import InsightRepositoryDB
from .profile_repo import ProfileRepositoryDB
from .round_repo import RoundRepositoryDB

__all__ = [
    "CourseRepositoryDB",
    "InsightRepositoryDB",
    "ProfileRepositoryDB",
    "RoundRepositoryDB",
]
