from fastapi import Request

from database.db_manager import DatabaseManager
from services.insight_generator import InsightGenerator
from services.round_finalizer import RoundFinalizer


def get_db(request: Request) -> DatabaseManager:
    """FastAPI dependency that provides the DatabaseManager."""
    return request.app.state.db_manager


def get_finalizer(request: Request) -> RoundFinalizer:
    return request.app.state.round_finalizer


def get_generator(request: Request) -> InsightGenerator:
    return request.app.state.insight_generator
