"""Round API endpoints."""

import logging

from fastapi import APIRouter, Depends, HTTPException

from api.dependencies import get_finalizer
from api.schemas import CompleteRoundRequest, CreateRoundRequest, HoleRecordsResponse, RoundResponse
from database.exceptions import DatabaseError, DuplicateError, NotFoundError
from models import Round
from services.round_finalizer import RoundFinalizer

logger = logging.getLogger(__name__)

router = APIRouter()


def to_response(r: Round) -> RoundResponse:
    return RoundResponse(**r.model_dump(exclude={"course"}))


@router.post("", response_model=RoundResponse, status_code=201)
async def create_round(
    req: CreateRoundRequest, finalizer: RoundFinalizer = Depends(get_finalizer)
):
    try:
        round_ = await finalizer.create_round(
            req.profile_id, req.course_id, tee_id=req.tee_id, tee_name=req.tee_name
        )
    except DuplicateError as e:
        raise HTTPException(409, str(e))
    except DatabaseError as e:
        raise HTTPException(500, str(e))
    return to_response(round_)


@router.post("/{round_id}/complete", response_model=RoundResponse)
async def complete_round(
    round_id: str,
    req: CompleteRoundRequest,
    finalizer: RoundFinalizer = Depends(get_finalizer),
):
    """Persist the buffered holes and mark the round complete."""
    try:
        completed = await finalizer.complete_round(round_id, req.hole_data, req.total_holes)
    except NotFoundError as e:
        raise HTTPException(404, str(e))
    except DatabaseError as e:
        logger.error("Complete round error: %s", e)
        raise HTTPException(500, str(e))
    return to_response(completed)


@router.get("/{round_id}/holes", response_model=HoleRecordsResponse)
async def get_round_holes(round_id: str, finalizer: RoundFinalizer = Depends(get_finalizer)):
    records = await finalizer.get_round_hole_data(round_id)
    return HoleRecordsResponse(
        round_id=round_id,
        holes=[r.model_dump(mode="json") for r in records],
    )


@router.delete("/{round_id}", status_code=204)
async def abandon_round(round_id: str, finalizer: RoundFinalizer = Depends(get_finalizer)):
    """Delete a round that was started but never completed."""
    deleted = await finalizer.abandon_round(round_id)
    if not deleted:
        raise HTTPException(404, "No incomplete round found")
