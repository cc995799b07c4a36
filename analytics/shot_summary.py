from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from models import Round, ShotResult, ShotType

logger = logging.getLogger(__name__)

SHOT_TYPE_ORDER = [t.value for t in ShotType]
SHOT_RESULT_ORDER = [r.value for r in ShotResult]


def empty_shot_tally() -> Dict[str, Dict[str, int]]:
    """Zeroed shot type x result matrix (7 x 3)."""
    return {shot_type: {result: 0 for result in SHOT_RESULT_ORDER} for shot_type in SHOT_TYPE_ORDER}


def _parse_timestamp(value: Any) -> Optional[datetime]:
    """Shot timestamps arrive as ISO strings or epoch milliseconds."""
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    if isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
    return None


def hole_time_info(shots: Iterable[dict], hole_number: Optional[int]) -> Dict[str, Any]:
    """Earliest/latest shot time and elapsed minutes for a hole.

    Duration needs at least two timestamps; times are epoch milliseconds.
    """
    stamps = [
        ts for ts in (_parse_timestamp(s.get("timestamp")) for s in shots if isinstance(s, dict))
        if ts is not None
    ]
    start = min(stamps) if stamps else None
    end = max(stamps) if stamps else None
    duration = None
    if len(stamps) >= 2:
        duration = (end - start).total_seconds() / 60
    return {
        "startTime": int(start.timestamp() * 1000) if start else None,
        "endTime": int(end.timestamp() * 1000) if end else None,
        "duration": duration,
        "sequenceInRound": hole_number,
    }


def tally_shots(shots: Iterable[dict], tally: Dict[str, Dict[str, int]], *, context: str = "") -> None:
    """Add each shot to the tally; unknown type/result pairs are logged and ignored."""
    for shot in shots:
        shot_type = shot.get("type") if isinstance(shot, dict) else None
        result = shot.get("result") if isinstance(shot, dict) else None
        if shot_type in tally and result in tally[shot_type]:
            tally[shot_type][result] += 1
        else:
            logger.warning("Unexpected shot data%s - type: %s, result: %s", context, shot_type, result)


def hole_detail(hole: dict) -> Optional[Dict[str, Any]]:
    """Detail record for one hole row, or None when its payload is malformed."""
    hole_data = hole.get("hole_data")
    if not isinstance(hole_data, dict) or not isinstance(hole_data.get("shots"), list):
        return None
    shots = hole_data["shots"]
    return {
        "holeNumber": hole["hole_number"],
        "par": hole_data.get("par") or None,
        "distance": hole_data.get("distance") or None,
        "index": hole_data.get("index") or None,
        "features": hole_data.get("features") or [],
        "totalShots": hole.get("total_score") or len(shots),
        "shots": shots,
        "timeInfo": hole_time_info(shots, hole["hole_number"]),
        "poi": hole_data.get("poi") or None,
    }


def summarize_round(round_obj: Round, holes: List[dict]) -> Dict[str, Any]:
    """Reshape a completed round and its raw hole rows for analysis.

    Holes are ordered by hole number. Malformed hole payloads are skipped
    with a warning and do not contribute to the tally.
    """
    tally = empty_shot_tally()
    details: List[Dict[str, Any]] = []
    for hole in sorted(holes, key=lambda h: h.get("hole_number") or 0):
        detail = hole_detail(hole)
        if detail is None:
            logger.warning(
                "Missing or invalid hole_data for hole %s in round %s",
                hole.get("hole_number"), round_obj.id,
            )
            continue
        details.append(detail)
        tally_shots(detail["shots"], tally, context=f" in round {round_obj.id}")

    course = round_obj.course
    played_at = round_obj.created_at
    return {
        "roundId": round_obj.id,
        "date": played_at.date().isoformat() if played_at else None,
        "time": played_at.strftime("%H:%M:%S") if played_at else None,
        "timestamp": int(played_at.timestamp() * 1000) if played_at else None,
        "totalScore": round_obj.gross_shots,
        "par": round_obj.course_par(),
        "teeName": round_obj.selected_tee_name or "Unknown",
        "shots": tally,
        "holeDetails": details,
        "courseName": (course.name if course else None) or "Unknown Course",
        "courseInfo": {
            "name": (course.name if course else None) or "Unknown Course",
            "clubName": course.club_name if course else None,
            "location": course.location if course else None,
            "country": course.country if course else None,
            "holes": course.holes if course else None,
        },
    }


def build_golf_data(
    rounds: List[Dict[str, Any]],
    *,
    handicap: Optional[float] = None,
    limited: bool = False,
) -> Dict[str, Any]:
    """Top-level data object sent to the model alongside the prompt."""
    data: Dict[str, Any] = {
        "rounds": rounds,
        "totalRounds": len(rounds),
    }
    if limited:
        data["limitedData"] = True
    if handicap is not None:
        data["userProfile"] = {"handicap": handicap}
    return data
