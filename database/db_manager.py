from __future__ import annotations

from pathlib import Path
from typing import Optional

import asyncpg

from database.repositories import (
    CourseRepositoryDB,
    InsightRepositoryDB,
    ProfileRepositoryDB,
    RoundRepositoryDB,
)


class DatabaseManager:
    """
    Bundles the async repositories over one connection pool.

    Notes:
    - Repositories use raw SQL (no ORM) to keep behavior explicit.
    - One instance is created at app startup and shared by all requests;
      it holds no per-request state.
    """

    def __init__(self, pool: asyncpg.Pool) -> None:
        self.pool = pool
        self.rounds = RoundRepositoryDB(pool)
        self.courses = CourseRepositoryDB(pool)
        self.profiles = ProfileRepositoryDB(pool)
        self.insights = InsightRepositoryDB(pool)

    async def initialize_schema(self, schema_path: Optional[str] = None) -> None:
        """Create tables defined in `database/schema.sql`."""
        path = Path(schema_path or Path(__file__).with_name("schema.sql")).resolve()
        if not path.exists():
            raise FileNotFoundError(f"Schema file not found: {path}")

        sql_text = path.read_text(encoding="utf-8")
        async with self.pool.acquire() as conn:
            async with conn.transaction():
                await conn.execute(sql_text)
