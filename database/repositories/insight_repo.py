"""Insert and read generated insight records."""

import asyncpg
from typing import Optional
from uuid import UUID

from models import InsightRecord
from database.converters import insight_record_from_row
from database.exceptions import DRIVER_ERRORS, PersistenceError


class InsightRepositoryDB:
    """Insight records are append-only: inserted once, never updated."""

    def __init__(self, pool: asyncpg.Pool):
        self._pool = pool

    async def create_insight(
        self, profile_id: str, insights: dict, *, round_id: Optional[str] = None
    ) -> str:
        """Store a payload. Returns the new record id."""
        try:
            async with self._pool.acquire() as conn:
                row = await conn.fetchrow(
                    """INSERT INTO insights (profile_id, round_id, insights)
                       VALUES ($1, $2, $3)
                       RETURNING id""",
                    UUID(profile_id),
                    UUID(round_id) if round_id else None,
                    insights,
                )
                return str(row["id"])
        except DRIVER_ERRORS + (ValueError,) as e:
            # ValueError: malformed profile or round id
            raise PersistenceError(f"Failed to store insights: {e}") from e

    async def get_latest_insight(self, profile_id: str) -> Optional[InsightRecord]:
        async with self._pool.acquire() as conn:
            row = await conn.fetchrow(
                """SELECT * FROM insights
                   WHERE profile_id = $1
                   ORDER BY created_at DESC
                   LIMIT 1""",
                UUID(profile_id),
            )
            return insight_record_from_row(row) if row else None
