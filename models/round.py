from datetime import datetime
from typing import Optional

from .base import BaseGolfModel
from .course import Course


class Round(BaseGolfModel):
    """One round played by a profile.

    Created incomplete when play starts; `is_complete`, `gross_shots` and
    `score` are written together, once, when the round is finalized.
    """
    id: Optional[str] = None
    profile_id: Optional[str] = None
    course_id: Optional[str] = None
    selected_tee_id: Optional[str] = None
    selected_tee_name: Optional[str] = None
    is_complete: bool = False
    gross_shots: Optional[int] = None
    score: Optional[int] = None  # relative to par, negative is under
    created_at: Optional[datetime] = None
    course: Optional[Course] = None

    def course_par(self) -> int:
        """Par of the joined course, or the 72 default."""
        if self.course:
            return self.course.effective_par()
        return Course().effective_par()
