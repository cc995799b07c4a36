from pydantic import ConfigDict, Field, model_validator
from typing import Any, Dict, List, Optional

from .base import BaseGolfModel
from .shot import Shot


class HoleData(BaseGolfModel):
    """Structured data for one hole as buffered by the tracker."""
    model_config = ConfigDict(validate_assignment=True, extra="ignore")

    par: Optional[int] = Field(None, ge=3, le=6)
    distance: Optional[float] = Field(None, ge=0)
    index: Optional[int] = Field(None, ge=1, le=18)
    features: List[Any] = Field(default_factory=list)
    shots: List[Shot] = Field(default_factory=list)
    poi: Optional[Dict[str, Any]] = None

    @property
    def shot_count(self) -> int:
        return len(self.shots)

    def has_shots(self) -> bool:
        return bool(self.shots)


class HoleRecord(BaseGolfModel):
    """Persisted shot data for one hole of a round (row in `shots`).

    Written once, at round completion, and immutable afterwards.
    """
    model_config = ConfigDict(validate_assignment=False)

    round_id: Optional[str] = None
    hole_number: int = Field(..., ge=1, le=18)
    hole_data: HoleData
    total_score: Optional[int] = None

    @model_validator(mode='after')
    def validate_total_score(self):
        expected = self.hole_data.shot_count
        if self.total_score is None:
            self.total_score = expected
        elif self.total_score != expected:
            raise ValueError(
                f"total_score ({self.total_score}) must equal the number of shots ({expected})"
            )
        return self
