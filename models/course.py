from pydantic import Field
from typing import Any, List, Optional

from .base import BaseGolfModel

DEFAULT_COURSE_PAR = 72


class Course(BaseGolfModel):
    """Golf course with the descriptive attributes used for analysis."""
    id: Optional[str] = None
    name: Optional[str] = None
    club_name: Optional[str] = None
    location: Optional[str] = None
    country: Optional[str] = None
    par: Optional[int] = Field(None, ge=27, le=80)
    holes: Optional[List[Any]] = None  # layout, when known

    def effective_par(self) -> int:
        """Course par, falling back to 72 when the course has none recorded."""
        return self.par or DEFAULT_COURSE_PAR
