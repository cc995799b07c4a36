"""API-specific request and response models."""

from datetime import datetime
from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Dict, List, Optional

from models import HoleData


class _CamelRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CreateRoundRequest(_CamelRequest):
    profile_id: str
    course_id: str
    tee_id: Optional[str] = None
    tee_name: Optional[str] = None


class CompleteRoundRequest(_CamelRequest):
    """Hole data buffered on the device, keyed by hole number."""
    hole_data: Dict[int, HoleData] = Field(default_factory=dict)
    total_holes: int = Field(18, ge=1, le=18)


class RoundResponse(BaseModel):
    id: str
    profile_id: Optional[str] = None
    course_id: Optional[str] = None
    selected_tee_id: Optional[str] = None
    selected_tee_name: Optional[str] = None
    is_complete: bool
    gross_shots: Optional[int] = None
    score: Optional[int] = None
    created_at: Optional[datetime] = None


class GenerateInsightsRequest(BaseModel):
    """Body of the insights function. `userId` is accepted for older clients."""
    profile_id: Optional[str] = Field(
        None, validation_alias=AliasChoices("profileId", "userId", "profile_id")
    )
    round_id: Optional[str] = Field(
        None, validation_alias=AliasChoices("roundId", "round_id")
    )


class CourseSummaryResponse(BaseModel):
    """Course for search/list views."""
    id: str
    name: Optional[str] = None
    club_name: Optional[str] = None
    location: Optional[str] = None
    country: Optional[str] = None
    par: Optional[int] = None
    total_holes: int = 0


class HoleRecordsResponse(BaseModel):
    round_id: str
    holes: List[dict]
