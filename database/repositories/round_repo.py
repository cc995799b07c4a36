"""CRUD operations for rounds and their per-hole shot records."""

import asyncpg
from typing import Dict, List, Optional
from uuid import UUID

from models import HoleRecord, Round
from database.converters import (
    hole_record_from_row,
    hole_record_to_row,
    joined_course_from_row,
    raw_hole_from_row,
    round_from_row,
)
from database.exceptions import DRIVER_ERRORS, DuplicateError, PersistenceError

_ROUND_WITH_COURSE_SQL = """
    SELECT r.*,
           c.name      AS course_name,
           c.club_name AS course_club_name,
           c.par       AS course_par,
           c.location  AS course_location,
           c.country   AS course_country,
           c.holes     AS course_holes
    FROM rounds r
    LEFT JOIN courses c ON c.id = r.course_id
"""

_UPSERT_HOLE_SQL = """
    INSERT INTO shots (round_id, hole_number, hole_data, total_score)
    VALUES ($1, $2, $3, $4)
    ON CONFLICT (round_id, hole_number)
    DO UPDATE SET hole_data = EXCLUDED.hole_data,
                  total_score = EXCLUDED.total_score
"""


class RoundRepositoryDB:
    """Async CRUD for rounds and the shots table."""

    def __init__(self, pool: asyncpg.Pool):
        self._pool = pool

    # ================================================================
    # Read
    # ================================================================

    async def get_round(self, round_id: str) -> Optional[Round]:
        """Get a round (without course join)."""
        async with self._pool.acquire() as conn:
            row = await conn.fetchrow(
                "SELECT * FROM rounds WHERE id = $1", UUID(round_id)
            )
            return round_from_row(row) if row else None

    async def get_recent_completed_rounds(
        self, profile_id: str, *, limit: int = 5
    ) -> List[Round]:
        """Most recent completed rounds for a profile, newest first, with course."""
        async with self._pool.acquire() as conn:
            rows = await conn.fetch(
                _ROUND_WITH_COURSE_SQL
                + """ WHERE r.profile_id = $1 AND r.is_complete = TRUE
                      ORDER BY r.created_at DESC
                      LIMIT $2""",
                UUID(profile_id), limit,
            )
            return [round_from_row(r, joined_course_from_row(r)) for r in rows]

    async def get_hole_records(self, round_id: str) -> List[HoleRecord]:
        """Validated hole records for a round, ordered by hole number."""
        async with self._pool.acquire() as conn:
            rows = await conn.fetch(
                "SELECT * FROM shots WHERE round_id = $1 ORDER BY hole_number",
                UUID(round_id),
            )
            return [hole_record_from_row(r) for r in rows]

    async def get_raw_holes_for_rounds(self, round_ids: List[str]) -> Dict[str, List[dict]]:
        """Batch-load hole rows for several rounds, grouped by round id.

        Hole payloads are returned unvalidated.
        """
        if not round_ids:
            return {}
        async with self._pool.acquire() as conn:
            rows = await conn.fetch(
                """SELECT * FROM shots
                   WHERE round_id = ANY($1::uuid[])
                   ORDER BY round_id, hole_number""",
                [UUID(rid) for rid in round_ids],
            )
        grouped: Dict[str, List[dict]] = {rid: [] for rid in round_ids}
        for row in rows:
            hole = raw_hole_from_row(row)
            grouped.setdefault(hole["round_id"], []).append(hole)
        return grouped

    # ================================================================
    # Create
    # ================================================================

    async def create_round(
        self,
        profile_id: str,
        course_id: str,
        *,
        tee_id: Optional[str] = None,
        tee_name: Optional[str] = None,
    ) -> Round:
        """Insert a new, incomplete round."""
        try:
            async with self._pool.acquire() as conn:
                row = await conn.fetchrow(
                    """INSERT INTO rounds
                       (profile_id, course_id, is_complete, selected_tee_id, selected_tee_name)
                       VALUES ($1, $2, FALSE, $3, $4)
                       RETURNING *""",
                    UUID(profile_id), UUID(course_id), tee_id, tee_name,
                )
                return round_from_row(row)
        except asyncpg.UniqueViolationError as e:
            raise DuplicateError(str(e)) from e
        except DRIVER_ERRORS as e:
            raise PersistenceError(f"Failed to create round: {e}") from e

    # ================================================================
    # Update
    # ================================================================

    async def upsert_hole(self, record: HoleRecord) -> None:
        """Insert or overwrite the shot record for (round, hole)."""
        try:
            async with self._pool.acquire() as conn:
                await conn.execute(_UPSERT_HOLE_SQL, *hole_record_to_row(record))
        except DRIVER_ERRORS as e:
            raise PersistenceError(str(e), hole_number=record.hole_number) from e

    async def mark_complete(
        self, round_id: str, *, gross_shots: int, score: int
    ) -> Optional[Round]:
        """Set the completion flag and totals in a single statement."""
        try:
            async with self._pool.acquire() as conn:
                row = await conn.fetchrow(
                    """UPDATE rounds
                       SET is_complete = TRUE, gross_shots = $2, score = $3
                       WHERE id = $1
                       RETURNING *""",
                    UUID(round_id), gross_shots, score,
                )
                return round_from_row(row) if row else None
        except DRIVER_ERRORS as e:
            raise PersistenceError(str(e)) from e

    # ================================================================
    # Delete
    # ================================================================

    async def delete_incomplete_round(self, round_id: str) -> bool:
        """Delete a round only while it is incomplete. Returns True if deleted."""
        async with self._pool.acquire() as conn:
            result = await conn.execute(
                "DELETE FROM rounds WHERE id = $1 AND is_complete = FALSE",
                UUID(round_id),
            )
            return result == "DELETE 1"
