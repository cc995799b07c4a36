from datetime import datetime
from pydantic import ConfigDict, Field, field_validator
from typing import List, Optional

from .base import BaseGolfModel, CamelModel


# ================================================================
# Model output contract
# ================================================================
# A field of the wrong type is read as missing; the card itself is kept.

def _text_or_none(v):
    if isinstance(v, str) or v is None:
        return v
    if isinstance(v, (int, float)):
        return str(v)
    return None


class RawCardIcon(BaseGolfModel):
    name: Optional[str] = None
    color: Optional[str] = None

    @field_validator('name', 'color', mode='before')
    @classmethod
    def coerce_text(cls, v):
        return _text_or_none(v)


class RawInsightCard(BaseGolfModel):
    """A card exactly as the model is asked to emit it."""
    model_config = ConfigDict(extra="ignore")

    id: Optional[str] = None
    title: Optional[str] = None
    content: Optional[str] = None
    type: Optional[str] = None
    priority: Optional[float] = None
    icon: Optional[RawCardIcon] = None
    variant: Optional[str] = None
    cta_text: Optional[str] = None

    @field_validator('id', 'title', 'content', 'type', 'variant', 'cta_text', mode='before')
    @classmethod
    def coerce_text(cls, v):
        return _text_or_none(v)

    @field_validator('priority', mode='before')
    @classmethod
    def coerce_priority(cls, v):
        if isinstance(v, bool):
            return None
        if isinstance(v, (int, float)):
            return v
        if isinstance(v, str):
            try:
                return float(v)
            except ValueError:
                return None
        return None

    @field_validator('icon', mode='before')
    @classmethod
    def coerce_icon(cls, v):
        return v if isinstance(v, dict) else None


class RawInsightResponse(BaseGolfModel):
    model_config = ConfigDict(extra="ignore")

    cards: List[RawInsightCard] = Field(default_factory=list)

    @field_validator('cards', mode='before')
    @classmethod
    def usable_cards(cls, v):
        if v is None:
            return []
        if isinstance(v, list):
            return [card for card in v if isinstance(card, dict)]
        return v


# ================================================================
# Normalized, UI-stable shape
# ================================================================

class InsightCard(CamelModel):
    """One normalized unit of coaching feedback."""
    id: Optional[str] = None
    title: Optional[str] = None
    content: Optional[str] = None
    icon_name: str = "analytics-outline"
    variant: str = "standard"
    use_premium_button: Optional[bool] = None
    product_id: Optional[str] = None
    cta_text: Optional[str] = None


class InsightPayload(CamelModel):
    """Stored and returned analysis for a profile.

    Either a card payload (summary + tiered_insights + legacy scalars) or,
    when the model answer could not be parsed, `error` + `raw_response`.
    """
    summary: Optional[str] = None
    tiered_insights: Optional[List[InsightCard]] = None
    primary_issue: Optional[str] = None
    reason: Optional[str] = None
    practice_focus: Optional[str] = None
    management_tip: Optional[str] = None
    progress: Optional[str] = None
    error: Optional[str] = None
    raw_response: Optional[str] = None
    analyzed_rounds: List[str] = Field(default_factory=list)
    generated_at: datetime
    product_access: Optional[str] = None

    @property
    def is_fallback(self) -> bool:
        return self.error is not None

    def to_wire(self) -> dict:
        data = super().to_wire()
        # Tier is part of the contract even when the caller is not entitled.
        data["productAccess"] = self.product_access
        return data


class InsightRecord(BaseGolfModel):
    """A persisted generation result (row in `insights`)."""
    id: Optional[str] = None
    profile_id: str
    round_id: Optional[str] = None
    insights: dict
    created_at: Optional[datetime] = None
