from datetime import datetime
from pydantic import Field
from typing import Optional

from .base import BaseGolfModel


class Profile(BaseGolfModel):
    """A golfer's profile."""
    id: Optional[str] = None
    first_name: Optional[str] = None
    handicap: Optional[float] = Field(None, ge=-10, le=54)
    created_at: Optional[datetime] = None
