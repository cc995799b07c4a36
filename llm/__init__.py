from .insight_client import InsightModelClient
from .prompts import build_basic_prompt, build_full_prompt, build_premium_prompt
from .response_parser import (
    PARSE_ERROR_MARKER,
    VARIANT_MAP,
    build_insight_payload,
    extract_json_text,
    map_card_variant,
    map_legacy_fields,
    parse_model_response,
)

__all__ = [
    "InsightModelClient",
    "build_basic_prompt",
    "build_full_prompt",
    "build_premium_prompt",
    "PARSE_ERROR_MARKER",
    "VARIANT_MAP",
    "build_insight_payload",
    "extract_json_text",
    "map_card_variant",
    "map_legacy_fields",
    "parse_model_response",
]
