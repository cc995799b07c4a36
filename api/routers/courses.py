"""Course API endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Query
from typing import List

from api.dependencies import get_db
from api.schemas import CourseSummaryResponse
from database.db_manager import DatabaseManager
from models import Course

router = APIRouter()


def summarize_course(c: Course) -> CourseSummaryResponse:
    return CourseSummaryResponse(
        id=c.id,
        name=c.name,
        club_name=c.club_name,
        location=c.location,
        country=c.country,
        par=c.par,
        total_holes=len(c.holes) if c.holes else 0,
    )


@router.get("", response_model=List[CourseSummaryResponse])
async def search_courses(
    name: str = Query(..., min_length=2),
    limit: int = Query(20, ge=1, le=100),
    db: DatabaseManager = Depends(get_db),
):
    courses = await db.courses.search_courses(name, limit=limit)
    return [summarize_course(c) for c in courses]


@router.get("/{course_id}", response_model=Course)
async def get_course(course_id: str, db: DatabaseManager = Depends(get_db)):
    course = await db.courses.get_course(course_id)
    if not course:
        raise HTTPException(404, "Course not found")
    return course
