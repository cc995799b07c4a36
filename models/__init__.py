from .base import BaseGolfModel, CamelModel
from .course import Course, DEFAULT_COURSE_PAR
from .hole_record import HoleData, HoleRecord
from .insight import (
    InsightCard,
    InsightPayload,
    InsightRecord,
    RawCardIcon,
    RawInsightCard,
    RawInsightResponse,
)
from .profile import Profile
from .round import Round
from .shot import Shot, ShotResult, ShotType

__all__ = [
    "BaseGolfModel",
    "CamelModel",
    "Course",
    "DEFAULT_COURSE_PAR",
    "HoleData",
    "HoleRecord",
    "InsightCard",
    "InsightPayload",
    "InsightRecord",
    "Profile",
    "RawCardIcon",
    "RawInsightCard",
    "RawInsightResponse",
    "Round",
    "Shot",
    "ShotResult",
    "ShotType",
]
