"""Reads for profiles and their product permissions."""

import asyncpg
from typing import Optional
from uuid import UUID

from models import Profile
from database.converters import profile_from_row


class ProfileRepositoryDB:
    """Async reads for profiles and user_permissions."""

    def __init__(self, pool: asyncpg.Pool):
        self._pool = pool

    async def get_profile(self, profile_id: str) -> Optional[Profile]:
        async with self._pool.acquire() as conn:
            row = await conn.fetchrow(
                "SELECT * FROM profiles WHERE id = $1", UUID(profile_id)
            )
            return profile_from_row(row) if row else None

    async def has_permission(self, profile_id: str, permission_id: str) -> bool:
        """True when at least one active grant exists for the product."""
        async with self._pool.acquire() as conn:
            found = await conn.fetchval(
                """SELECT EXISTS (
                       SELECT 1 FROM user_permissions
                       WHERE profile_id = $1 AND permission_id = $2 AND active = TRUE
                   )""",
                UUID(profile_id), permission_id,
            )
            return bool(found)
