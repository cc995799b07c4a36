from datetime import datetime
from enum import Enum
from pydantic import ConfigDict
from typing import Optional

from .base import BaseGolfModel


class ShotType(str, Enum):
    """Shot taxonomy recorded by the tracker."""
    TEE_SHOT = "Tee Shot"
    LONG_SHOT = "Long Shot"
    APPROACH = "Approach"
    CHIP = "Chip"
    PUTT = "Putts"
    SAND = "Sand"
    PENALTY = "Penalties"


class ShotResult(str, Enum):
    """Qualitative outcome of a shot."""
    ON_TARGET = "On Target"
    SLIGHTLY_OFF = "Slightly Off"
    RECOVERY_NEEDED = "Recovery Needed"


class Shot(BaseGolfModel):
    """One swing within a hole. Identified only by its position in the hole."""
    # Tracker payloads may carry extra keys (e.g. GPS coordinates); keep them.
    model_config = ConfigDict(validate_assignment=True, extra="allow")

    type: ShotType
    result: ShotResult
    timestamp: Optional[datetime] = None
