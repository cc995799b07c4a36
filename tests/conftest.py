import pytest
from unittest.mock import AsyncMock, MagicMock


@pytest.fixture
def mock_pool():
    pool = MagicMock()
    conn = AsyncMock()
    pool.acquire.return_value.__aenter__.return_value = conn
    return pool, conn


@pytest.fixture
def fake_db():
    """DatabaseManager stand-in with AsyncMock repositories."""
    db = MagicMock()
    db.rounds = AsyncMock()
    db.courses = AsyncMock()
    db.profiles = AsyncMock()
    db.insights = AsyncMock()
    return db
