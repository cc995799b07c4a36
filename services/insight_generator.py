"""Insight generation: recent rounds -> model prompt -> normalized cards."""

import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional, Protocol

from pydantic import Field

from analytics.shot_summary import build_golf_data, summarize_round
from database.db_manager import DatabaseManager
from database.exceptions import DRIVER_ERRORS, DatabaseError
from llm.prompts import build_basic_prompt, build_full_prompt, build_premium_prompt
from llm.response_parser import build_insight_payload
from models import CamelModel, InsightPayload, Round
from services.config import settings
from services.exceptions import NoDataError

logger = logging.getLogger(__name__)

# Malformed ids surface as ValueError from UUID()
_LOOKUP_ERRORS = DRIVER_ERRORS + (ValueError,)

NO_ROUNDS_MESSAGE = "No completed rounds found. Please complete a round first."


class TextGenerator(Protocol):
    """The slice of the model client the generator needs."""

    async def generate(self, prompt: str, *, max_tokens: int) -> str:
        ...


class InsightResponse(CamelModel):
    """What a caller of the insights function receives."""
    message: str = "Golf insights generated successfully"
    insights: InsightPayload
    insights_id: Optional[str] = None
    analyzed_rounds: List[str] = Field(default_factory=list)
    timestamp: datetime
    product_access: Optional[str] = None

    def to_wire(self) -> dict:
        data = self.model_dump(mode="json", by_alias=True, exclude={"insights"})
        data["insights"] = self.insights.to_wire()
        return data


class InsightGenerator:
    """Stateless per call; safe to share across requests."""

    def __init__(
        self,
        db: DatabaseManager,
        model_client: TextGenerator,
        *,
        product_id: str = settings.INSIGHTS_PRODUCT_ID,
        rounds_limit: int = settings.RECENT_ROUNDS_LIMIT,
        premium_max_tokens: int = settings.PREMIUM_MAX_TOKENS,
        basic_max_tokens: int = settings.BASIC_MAX_TOKENS,
    ):
        self._db = db
        self._model = model_client
        self.product_id = product_id
        self.rounds_limit = rounds_limit
        self.premium_max_tokens = premium_max_tokens
        self.basic_max_tokens = basic_max_tokens

    # ================================================================
    # Enrichment lookups (never fatal)
    # ================================================================

    async def _load_handicap(self, profile_id: str) -> Optional[float]:
        try:
            profile = await self._db.profiles.get_profile(profile_id)
        except _LOOKUP_ERRORS as e:
            logger.error("Error fetching profile %s: %s", profile_id, e)
            return None
        return profile.handicap if profile else None

    async def _has_entitlement(self, profile_id: str) -> bool:
        """Fail closed: any lookup problem means not entitled."""
        try:
            entitled = await self._db.profiles.has_permission(profile_id, self.product_id)
        except _LOOKUP_ERRORS as e:
            logger.error("Error checking product permissions for %s: %s", profile_id, e)
            return False
        logger.info("Profile %s has %s permission: %s", profile_id, self.product_id, entitled)
        return entitled

    # ================================================================
    # Data assembly
    # ================================================================

    async def _load_rounds(self, profile_id: str, limit: int) -> List[Round]:
        try:
            rounds = await self._db.rounds.get_recent_completed_rounds(profile_id, limit=limit)
        except _LOOKUP_ERRORS as e:
            logger.error("Error fetching rounds for %s: %s", profile_id, e)
            raise DatabaseError("Could not retrieve your recent rounds data") from e
        if not rounds:
            raise NoDataError(NO_ROUNDS_MESSAGE)
        return rounds

    async def _load_holes(self, round_ids: List[str]) -> Dict[str, List[dict]]:
        try:
            return await self._db.rounds.get_raw_holes_for_rounds(round_ids)
        except _LOOKUP_ERRORS as e:
            logger.error("Error fetching shots data: %s", e)
            raise DatabaseError("Could not retrieve shot data for your rounds") from e

    async def _store(
        self, profile_id: str, round_id: Optional[str], payload: InsightPayload
    ) -> Optional[str]:
        """Persist the payload; a failed write is logged and the payload still returned."""
        try:
            insights_id = await self._db.insights.create_insight(
                profile_id, payload.to_wire(), round_id=round_id
            )
        except DatabaseError as e:
            logger.error("Error storing insights for %s: %s", profile_id, e)
            return None
        logger.info("Insights stored with ID %s", insights_id)
        return insights_id

    # ================================================================
    # Entry point
    # ================================================================

    async def generate_insights(
        self, profile_id: str, round_id: Optional[str] = None
    ) -> InsightResponse:
        """Analyse recent rounds for a profile and store the result.

        Raises NoDataError when no completed round exists, DatabaseError when
        rounds or shots cannot be read, UpstreamError when the model call
        fails. An unparseable model answer is not an error: the stored and
        returned payload then carries the raw text.
        """
        handicap = await self._load_handicap(profile_id)
        entitled = await self._has_entitlement(profile_id)

        rounds = await self._load_rounds(profile_id, self.rounds_limit if entitled else 1)
        round_ids = [r.id for r in rounds]
        holes_by_round = await self._load_holes(round_ids)
        summaries = [summarize_round(r, holes_by_round.get(r.id, [])) for r in rounds]

        if entitled:
            golf_data = build_golf_data(summaries, handicap=handicap)
            prompt = build_premium_prompt(len(summaries), handicap)
            max_tokens = self.premium_max_tokens
        else:
            summaries = summaries[:1]
            round_ids = round_ids[:1]
            golf_data = build_golf_data(summaries, handicap=handicap, limited=True)
            prompt = build_basic_prompt(len(summaries), handicap)
            max_tokens = self.basic_max_tokens

        hole_count = sum(len(s["holeDetails"]) for s in summaries)
        logger.info(
            "Requesting %s insights for %d rounds with %d holes",
            "premium" if entitled else "basic", len(summaries), hole_count,
        )
        text = await self._model.generate(build_full_prompt(prompt, golf_data), max_tokens=max_tokens)

        payload = build_insight_payload(
            text,
            entitled=entitled,
            analyzed_rounds=round_ids,
            product_id=self.product_id,
        )
        insights_id = await self._store(profile_id, round_id, payload)

        product_access = self.product_id if entitled else None
        logger.info(
            "Insights generated for %s", profile_id,
            extra={"extra_fields": {
                "event": "insights_generated",
                "profile_id": profile_id,
                "round_id": round_id,
                "product_access": product_access,
                "analyzed_rounds": len(round_ids),
                "parse_failed": payload.is_fallback,
                "stored": insights_id is not None,
            }},
        )
        return InsightResponse(
            insights=payload,
            insights_id=insights_id,
            analyzed_rounds=round_ids,
            timestamp=datetime.now(timezone.utc),
            product_access=product_access,
        )

    async def get_latest_insights(self, profile_id: str):
        """Most recently stored insight record for a profile, or None.

        A malformed profile id raises ValueError; store failures raise
        DatabaseError.
        """
        try:
            return await self._db.insights.get_latest_insight(profile_id)
        except DRIVER_ERRORS as e:
            logger.error("Error fetching latest insights for %s: %s", profile_id, e)
            raise DatabaseError("Could not retrieve stored insights") from e
