"""Conversion between asyncpg rows and Pydantic domain models.

Centralizes the mapping between the flat tables and the models. JSONB
columns arrive already decoded (see `database.connection`), but rows built
by hand or by other drivers may still carry JSON text, so both are accepted.
"""

import json
from typing import Any, Optional
from uuid import UUID

from models import Course, HoleData, HoleRecord, InsightRecord, Profile, Round


def _str_id(value) -> Optional[str]:
    return str(value) if value is not None else None


def _json_value(value) -> Any:
    if isinstance(value, (str, bytes)):
        return json.loads(value)
    return value


# ================================================================
# Row -> Model (reads)
# ================================================================

def course_from_row(row) -> Course:
    """courses row -> Course model."""
    holes = _json_value(row["holes"])
    return Course(
        id=_str_id(row["id"]),
        name=row["name"],
        club_name=row["club_name"],
        location=row["location"],
        country=row["country"],
        par=row["par"],
        holes=holes if isinstance(holes, list) else None,
    )


def joined_course_from_row(row) -> Optional[Course]:
    """Course columns of a rounds+courses join (prefixed `course_`)."""
    if row["course_id"] is None:
        return None
    holes = _json_value(row["course_holes"])
    return Course(
        id=_str_id(row["course_id"]),
        name=row["course_name"],
        club_name=row["course_club_name"],
        location=row["course_location"],
        country=row["course_country"],
        par=row["course_par"],
        holes=holes if isinstance(holes, list) else None,
    )


def round_from_row(row, course: Optional[Course] = None) -> Round:
    """rounds row -> Round model."""
    return Round(
        id=_str_id(row["id"]),
        profile_id=_str_id(row["profile_id"]),
        course_id=_str_id(row["course_id"]),
        selected_tee_id=_str_id(row["selected_tee_id"]),
        selected_tee_name=row["selected_tee_name"],
        is_complete=bool(row["is_complete"]),
        gross_shots=row["gross_shots"],
        score=row["score"],
        created_at=row["created_at"],
        course=course,
    )


def hole_record_from_row(row) -> HoleRecord:
    """shots row -> HoleRecord model."""
    return HoleRecord(
        round_id=_str_id(row["round_id"]),
        hole_number=row["hole_number"],
        hole_data=HoleData.model_validate(_json_value(row["hole_data"])),
        total_score=row["total_score"],
    )


def raw_hole_from_row(row) -> dict:
    """shots row -> plain dict with decoded hole_data, for analysis.

    Unlike `hole_record_from_row` this does not validate the payload, so
    malformed hole data can be detected and skipped downstream.
    """
    try:
        hole_data = _json_value(row["hole_data"])
    except ValueError:
        hole_data = None
    return {
        "round_id": _str_id(row["round_id"]),
        "hole_number": row["hole_number"],
        "hole_data": hole_data,
        "total_score": row["total_score"],
    }


def profile_from_row(row) -> Profile:
    """profiles row -> Profile model."""
    return Profile(
        id=_str_id(row["id"]),
        first_name=row["first_name"],
        handicap=float(row["handicap"]) if row["handicap"] is not None else None,
        created_at=row["created_at"],
    )


def insight_record_from_row(row) -> InsightRecord:
    """insights row -> InsightRecord model."""
    return InsightRecord(
        id=_str_id(row["id"]),
        profile_id=_str_id(row["profile_id"]),
        round_id=_str_id(row["round_id"]),
        insights=_json_value(row["insights"]) or {},
        created_at=row["created_at"],
    )


# ================================================================
# Model -> Row values (writes)
# ================================================================

def hole_data_to_json(hole_data: HoleData) -> dict:
    """HoleData -> JSON-ready dict for shots.hole_data (POI included)."""
    return hole_data.model_dump(mode="json", exclude_none=True)


def hole_record_to_row(record: HoleRecord) -> tuple:
    """HoleRecord -> (round_id, hole_number, hole_data, total_score) for upsert."""
    return (
        UUID(record.round_id),
        record.hole_number,
        hole_data_to_json(record.hole_data),
        record.total_score,
    )
