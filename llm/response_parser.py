"""Turn the model's free-text answer into a normalized insight payload."""

import json
import logging
import re
from datetime import datetime, timezone
from typing import Dict, List, Optional

from pydantic import ValidationError

from models import InsightCard, InsightPayload, RawInsightCard, RawInsightResponse
from services.exceptions import ParseError

logger = logging.getLogger(__name__)

PARSE_ERROR_MARKER = "Failed to parse as JSON"
DEFAULT_ICON = "analytics-outline"
DEFAULT_CTA_TEXT = "Unlock Premium Insights"
PREMIUM_CARD_TYPE = "premium-feature"
SUMMARY_CARD_TYPE = "summary"

DEFAULT_PREMIUM_SUMMARY = "Analysis is being generated based on your recent play."
DEFAULT_BASIC_SUMMARY = "Complete a round to get basic insights about your game."

# Ordered: each pattern is tried only when the previous one finds nothing.
_EXTRACTION_CHAIN = (
    re.compile(r"```[A-Za-z]+\s*([\s\S]*?)\s*```"),
    re.compile(r"```\s*([\s\S]*?)\s*```"),
)

VARIANT_MAP = {
    "filled": "highlight",
    "outlined": "standard",
    "alert": "alert",
    "success": "success",
    "highlight": "highlight",
    "standard": "standard",
}

# Card type -> legacy scalar field, for clients that predate card lists.
LEGACY_FIELDS = {
    "sequence": "primary_issue",
    "pattern": "reason",
    "spatial": "practice_focus",
    "temporal": "management_tip",
}

BASIC_LEGACY_PLACEHOLDERS = {
    "primary_issue": "Upgrade to premium insights to receive detailed analysis of your primary technical issues.",
    "reason": "Premium insights include root cause analysis based on comprehensive shot pattern detection.",
    "practice_focus": "Unlock premium insights for personalized practice recommendations tailored to your game.",
    "management_tip": "Premium insights include course management strategies designed for your playing style.",
}


# --- Extraction ---

def extract_json_text(text: str) -> str:
    """Pull the JSON candidate out of a model answer.

    Tries a fenced block with a language tag, then a bare fenced block, then
    falls back to the whole text.
    """
    for pattern in _EXTRACTION_CHAIN:
        match = pattern.search(text)
        if match and match.group(1):
            return match.group(1)
    return text


def parse_model_response(text: str) -> RawInsightResponse:
    """Parse the card contract from a model answer, raising ParseError."""
    try:
        data = json.loads(extract_json_text(text))
    except json.JSONDecodeError as e:
        raise ParseError(f"{PARSE_ERROR_MARKER}: {e}") from e
    if not isinstance(data, dict):
        raise ParseError(f"{PARSE_ERROR_MARKER}: expected an object, got {type(data).__name__}")
    try:
        return RawInsightResponse.model_validate(data)
    except ValidationError as e:
        raise ParseError(f"{PARSE_ERROR_MARKER}: {e.errors()[0]['msg']}") from e


# --- Normalization ---

def map_card_variant(variant: Optional[str]) -> str:
    """Whitelist a free-form variant; anything unknown becomes "standard"."""
    return VARIANT_MAP.get(variant, "standard") if isinstance(variant, str) else "standard"


def _priority_key(card: RawInsightCard) -> float:
    return card.priority if card.priority is not None else float("inf")


def map_legacy_fields(cards: List[RawInsightCard]) -> Dict[str, str]:
    """Content of the highest-priority (lowest number) card per legacy type."""
    legacy: Dict[str, str] = {}
    for card_type, field_name in LEGACY_FIELDS.items():
        matching = [c for c in cards if c.type == card_type]
        if matching:
            # min() keeps the first card on ties
            legacy[field_name] = min(matching, key=_priority_key).content
    return legacy


def _to_card(raw: RawInsightCard) -> InsightCard:
    return InsightCard(
        id=raw.id,
        title=raw.title,
        content=raw.content,
        icon_name=(raw.icon.name if raw.icon else None) or DEFAULT_ICON,
        variant=map_card_variant(raw.variant),
    )


def _now() -> datetime:
    return datetime.now(timezone.utc)


def normalize_premium(
    parsed: RawInsightResponse, analyzed_rounds: List[str], product_id: str
) -> InsightPayload:
    cards = parsed.cards
    payload = InsightPayload(
        summary=(cards[0].content if cards else None) or DEFAULT_PREMIUM_SUMMARY,
        tiered_insights=[_to_card(c) for c in cards],
        analyzed_rounds=analyzed_rounds,
        generated_at=_now(),
        product_access=product_id,
    )
    if cards:
        for field_name, content in map_legacy_fields(cards).items():
            setattr(payload, field_name, content)
        payload.progress = "null"
    return payload


def normalize_basic(
    parsed: RawInsightResponse, analyzed_rounds: List[str], product_id: str
) -> InsightPayload:
    summary_card = next((c for c in parsed.cards if c.type == SUMMARY_CARD_TYPE), None)
    tiered: List[InsightCard] = []
    for raw in parsed.cards:
        card = _to_card(raw)
        is_teaser = raw.type == PREMIUM_CARD_TYPE
        card.use_premium_button = is_teaser
        if is_teaser:
            card.product_id = product_id
            card.cta_text = raw.cta_text or DEFAULT_CTA_TEXT
        tiered.append(card)

    return InsightPayload(
        summary=(summary_card.content if summary_card else None) or DEFAULT_BASIC_SUMMARY,
        tiered_insights=tiered,
        progress="null",
        analyzed_rounds=analyzed_rounds,
        generated_at=_now(),
        product_access=None,
        **BASIC_LEGACY_PLACEHOLDERS,
    )


def fallback_payload(
    raw_text: str, analyzed_rounds: List[str], product_access: Optional[str]
) -> InsightPayload:
    """Storable payload for an answer that held no usable JSON."""
    return InsightPayload(
        error=PARSE_ERROR_MARKER,
        raw_response=raw_text,
        analyzed_rounds=analyzed_rounds,
        generated_at=_now(),
        product_access=product_access,
    )


def build_insight_payload(
    text: str,
    *,
    entitled: bool,
    analyzed_rounds: List[str],
    product_id: str,
) -> InsightPayload:
    """Parse and normalize a model answer. Never raises on bad model output."""
    try:
        parsed = parse_model_response(text)
    except ParseError as e:
        logger.error("Could not parse insight response: %s", e)
        return fallback_payload(text, analyzed_rounds, product_id if entitled else None)

    if entitled:
        return normalize_premium(parsed, analyzed_rounds, product_id)
    return normalize_basic(parsed, analyzed_rounds, product_id)
