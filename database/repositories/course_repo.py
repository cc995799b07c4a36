"""Read access to the courses table."""

import asyncpg
from typing import List, Optional
from uuid import UUID

from models import Course
from database.converters import course_from_row


class CourseRepositoryDB:
    """Async reads for courses."""

    def __init__(self, pool: asyncpg.Pool):
        self._pool = pool

    async def get_course(self, course_id: str) -> Optional[Course]:
        """Get a Course by ID."""
        async with self._pool.acquire() as conn:
            row = await conn.fetchrow(
                "SELECT * FROM courses WHERE id = $1", UUID(course_id)
            )
            return course_from_row(row) if row else None

    async def search_courses(self, name: str, *, limit: int = 20) -> List[Course]:
        """Case-insensitive substring search on course or club name."""
        async with self._pool.acquire() as conn:
            rows = await conn.fetch(
                """SELECT * FROM courses
                   WHERE name ILIKE '%' || $1 || '%'
                      OR club_name ILIKE '%' || $1 || '%'
                   ORDER BY name
                   LIMIT $2""",
                name, limit,
            )
            return [course_from_row(r) for r in rows]
