"""FastAPI application for the golf insights service."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.logging_config import setup_logging
from database.connection import db
from database.db_manager import DatabaseManager
from llm.insight_client import InsightModelClient
from services.config import settings
from services.insight_generator import InsightGenerator
from services.insight_trigger import HttpInsightTrigger, InProcessInsightTrigger
from services.round_finalizer import RoundFinalizer

logger = logging.getLogger(__name__)

FUNCTIONS_PREFIX = "/functions/v1"


class FunctionAwareCORSMiddleware(CORSMiddleware):
    """CORS for the REST API; function routes answer their own preflights."""

    async def __call__(self, scope, receive, send):
        if scope["type"] == "http" and scope["path"].startswith(FUNCTIONS_PREFIX):
            await self.app(scope, receive, send)
            return
        await super().__call__(scope, receive, send)


def build_services(app: FastAPI, db_manager: DatabaseManager) -> None:
    """Wire the pipeline objects once and attach them to app.state."""
    generator = InsightGenerator(db_manager, InsightModelClient())
    if settings.INSIGHTS_FUNCTION_URL:
        trigger = HttpInsightTrigger(
            settings.INSIGHTS_FUNCTION_URL, api_key=settings.INSIGHTS_FUNCTION_KEY
        )
    else:
        trigger = InProcessInsightTrigger(generator)

    app.state.db_manager = db_manager
    app.state.insight_generator = generator
    app.state.insight_trigger = trigger
    app.state.round_finalizer = RoundFinalizer(db_manager, trigger)
    logger.info("Insight trigger: %s", type(trigger).__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize DB pool and pipeline on startup, drain and close on shutdown."""
    await db.initialize(dsn=settings.DATABASE_URL)
    db_manager = DatabaseManager(db.pool)
    if settings.DB_INIT_SCHEMA:
        await db_manager.initialize_schema()
    build_services(app, db_manager)
    yield
    await app.state.insight_trigger.drain()
    await db.close()


def create_app() -> FastAPI:
    setup_logging()

    app = FastAPI(
        title="Golf Insights API",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        FunctionAwareCORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from api.routers import courses, insights, rounds
    app.include_router(courses.router, prefix="/api/courses", tags=["courses"])
    app.include_router(rounds.router, prefix="/api/rounds", tags=["rounds"])
    app.include_router(insights.router, prefix="/api/insights", tags=["insights"])
    app.include_router(insights.function_router, prefix=FUNCTIONS_PREFIX, tags=["functions"])

    @app.get("/api/health")
    async def health():
        healthy = await db.health_check()
        return {"status": "ok" if healthy else "degraded", "database": healthy}

    return app


app = create_app()
