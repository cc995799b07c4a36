"""Round lifecycle: start, abandon and finalize a round."""

import logging
import time
from typing import List, Mapping, Optional

from database.db_manager import DatabaseManager
from database.exceptions import DRIVER_ERRORS, DatabaseError, NotFoundError, PersistenceError
from models import HoleData, HoleRecord, Round
from services.insight_trigger import InsightTrigger, NullInsightTrigger

logger = logging.getLogger(__name__)

_LOOKUP_ERRORS = DRIVER_ERRORS + (ValueError,)


class RoundFinalizer:
    """Persists buffered hole data and closes out rounds.

    Holes are written one at a time in hole order. Nothing spans the hole
    writes and the final round update: if a later step fails, earlier holes
    stay written, and re-running `complete_round` with the same data
    converges to the same state.
    """

    def __init__(self, db: DatabaseManager, trigger: Optional[InsightTrigger] = None):
        self._db = db
        self._trigger = trigger or NullInsightTrigger()

    # ================================================================
    # Start / abandon
    # ================================================================

    async def create_round(
        self,
        profile_id: str,
        course_id: str,
        tee_id: Optional[str] = None,
        tee_name: Optional[str] = None,
    ) -> Round:
        """Start a new, incomplete round."""
        round_ = await self._db.rounds.create_round(
            profile_id, course_id, tee_id=tee_id, tee_name=tee_name
        )
        logger.info("Round %s created for profile %s", round_.id, profile_id)
        return round_

    async def abandon_round(self, round_id: str) -> bool:
        """Delete a round the player left without finishing.

        Completed rounds are never deleted. Returns False rather than raising.
        """
        started = time.monotonic()
        event = {"event": "round_abandoned", "round_id": round_id}
        try:
            deleted = await self._db.rounds.delete_incomplete_round(round_id)
        except _LOOKUP_ERRORS as e:
            event.update(
                success=False,
                error_code=getattr(e, "sqlstate", None) or "EXCEPTION",
                error_message=str(e),
                operation_duration_ms=int((time.monotonic() - started) * 1000),
            )
            logger.error("Error deleting round %s: %s", round_id, e, extra={"extra_fields": event})
            return False

        event.update(success=deleted, operation_duration_ms=int((time.monotonic() - started) * 1000))
        logger.info("Abandon round %s: deleted=%s", round_id, deleted, extra={"extra_fields": event})
        return deleted

    async def get_round_hole_data(self, round_id: str) -> List[HoleRecord]:
        """Stored hole records for a round; empty on failure."""
        try:
            return await self._db.rounds.get_hole_records(round_id)
        except _LOOKUP_ERRORS as e:
            logger.error("Error getting hole data for round %s: %s", round_id, e)
            return []

    # ================================================================
    # Completion
    # ================================================================

    async def _fetch_round(self, round_id: str) -> Round:
        try:
            round_ = await self._db.rounds.get_round(round_id)
        except _LOOKUP_ERRORS as e:
            raise DatabaseError(f"Failed to fetch round information: {e}") from e
        if round_ is None:
            raise NotFoundError(f"Failed to fetch round information: round {round_id} not found")
        return round_

    async def _fetch_course_par(self, round_: Round) -> int:
        if not round_.course_id:
            raise NotFoundError(f"Failed to fetch course information: round {round_.id} has no course")
        try:
            course = await self._db.courses.get_course(round_.course_id)
        except _LOOKUP_ERRORS as e:
            raise DatabaseError(f"Failed to fetch course information: {e}") from e
        if course is None:
            raise NotFoundError(f"Failed to fetch course information: course {round_.course_id} not found")
        return course.effective_par()

    async def _save_holes(
        self, round_id: str, hole_data: Mapping[int, HoleData], total_holes: int
    ) -> int:
        """Upsert every hole that has shots. Returns the gross shot count."""
        gross_shots = 0
        holes_written = 0
        for hole_number in range(1, total_holes + 1):
            data = hole_data.get(hole_number)
            if data is None or not data.has_shots():
                logger.debug("Skipping hole %d - no shot data", hole_number)
                continue

            record = HoleRecord(round_id=round_id, hole_number=hole_number, hole_data=data)
            try:
                await self._db.rounds.upsert_hole(record)
            except PersistenceError as e:
                raise PersistenceError(
                    f"Failed to save data for hole {hole_number}: {e}",
                    hole_number=hole_number,
                ) from e
            gross_shots += record.total_score
            holes_written += 1

        logger.info("Saved %d holes with %d total shots for round %s", holes_written, gross_shots, round_id)
        return gross_shots

    def _trigger_insights(self, profile_id: Optional[str], round_id: str) -> None:
        if not profile_id:
            logger.warning("Round %s has no profile; insights not triggered", round_id)
            return
        try:
            self._trigger.dispatch(profile_id, round_id)
        except Exception:
            # Round completion has already succeeded and must be reported as such.
            logger.exception("Failed to trigger insights generation for round %s", round_id)

    async def complete_round(
        self,
        round_id: str,
        hole_data: Mapping[int, HoleData],
        total_holes: int = 18,
    ) -> Round:
        """Persist buffered holes, score the round and mark it complete.

        Score is gross shots minus the full course par, whatever the number
        of holes played. Insight generation is then dispatched without
        waiting for it.
        """
        logger.info("Completing round %s with %d buffered holes", round_id, len(hole_data))

        round_ = await self._fetch_round(round_id)
        course_par = await self._fetch_course_par(round_)
        gross_shots = await self._save_holes(round_id, hole_data, total_holes)
        score = gross_shots - course_par

        try:
            completed = await self._db.rounds.mark_complete(
                round_id, gross_shots=gross_shots, score=score
            )
        except PersistenceError as e:
            raise PersistenceError(f"Failed to finalize round: {e}") from e
        if completed is None:
            raise PersistenceError(f"Failed to finalize round: round {round_id} no longer exists")

        logger.info(
            "Round %s complete: %d shots, %+d to par", round_id, gross_shots, score,
            extra={"extra_fields": {
                "event": "round_completed",
                "round_id": round_id,
                "profile_id": round_.profile_id,
                "course_par": course_par,
                "gross_shots": gross_shots,
                "score": score,
            }},
        )
        self._trigger_insights(round_.profile_id, round_id)
        return completed
