import json
import logging
from typing import Optional

import asyncpg

logger = logging.getLogger(__name__)


async def _init_connection(conn: asyncpg.Connection) -> None:
    """Decode json/jsonb columns into Python objects on every connection."""
    for typename in ("json", "jsonb"):
        await conn.set_type_codec(
            typename,
            encoder=json.dumps,
            decoder=json.loads,
            schema="pg_catalog",
        )


class DatabasePool:
    """Owns the asyncpg pool shared by every repository."""

    def __init__(self):
        self._pool: Optional[asyncpg.Pool] = None

    async def initialize(
        self,
        dsn: Optional[str] = None,
        *,
        min_size: int = 2,
        max_size: int = 10,
        command_timeout: float = 30.0,
    ) -> None:
        """Open the pool once at startup.

        Without a DSN, asyncpg falls back to the libpq PG* environment
        variables (PGHOST, PGDATABASE, ...).
        """
        if self._pool is not None:
            return
        self._pool = await asyncpg.create_pool(
            dsn=dsn,
            min_size=min_size,
            max_size=max_size,
            command_timeout=command_timeout,
            init=_init_connection,
        )
        logger.info("Database pool ready (min=%d, max=%d)", min_size, max_size)

    async def close(self) -> None:
        if self._pool is not None:
            await self._pool.close()
            self._pool = None
            logger.info("Database pool closed")

    @property
    def pool(self) -> asyncpg.Pool:
        if self._pool is None:
            raise RuntimeError("Database pool not initialized; the app lifespan opens it")
        return self._pool

    async def health_check(self) -> bool:
        """True when a pooled connection answers SELECT 1."""
        try:
            async with self.pool.acquire() as conn:
                return await conn.fetchval("SELECT 1") == 1
        except (RuntimeError, asyncpg.PostgresError, asyncpg.InterfaceError, OSError):
            logger.warning("Database health check failed", exc_info=True)
            return False


# Opened and closed by the API lifespan
db = DatabasePool()
