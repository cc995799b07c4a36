import json

import pytest

from llm.prompts import build_basic_prompt, build_full_prompt, build_premium_prompt
from llm.response_parser import (
    BASIC_LEGACY_PLACEHOLDERS,
    DEFAULT_CTA_TEXT,
    PARSE_ERROR_MARKER,
    build_insight_payload,
    extract_json_text,
    map_card_variant,
    map_legacy_fields,
    parse_model_response,
)
from models import RawInsightCard
from services.exceptions import ParseError


def _card(card_id, card_type, priority, content=None, **kwargs):
    return {
        "id": card_id,
        "title": f"Title {card_id}",
        "content": content or f"Content {card_id}",
        "type": card_type,
        "priority": priority,
        **kwargs,
    }


PREMIUM_CARDS = [
    _card("1", "summary", 1, "Solid round overall", icon={"name": "trophy-outline"}, variant="filled"),
    _card("2", "sequence", 3, "Late sequence issue"),
    _card("3", "sequence", 2, "Early sequence issue", variant="outlined"),
    _card("4", "pattern", 4, "Missing left", variant="alert"),
    _card("5", "spatial", 5, "Hole 7 trouble", variant="neon-glow"),
    _card("6", "temporal", 6, "Back nine fade", variant="success"),
]


def _premium(text):
    return build_insight_payload(text, entitled=True, analyzed_rounds=["r1", "r2"], product_id="product_a")


def _basic(text):
    return build_insight_payload(text, entitled=False, analyzed_rounds=["r1"], product_id="product_a")


# ================================================================
# Extraction
# ================================================================

def test_extract_prefers_tagged_fence():
    text = 'Here you go:\n```json\n{"cards": []}\n```\nThanks'
    assert extract_json_text(text) == '{"cards": []}'


def test_extract_untagged_fence():
    assert extract_json_text('```\n{"cards": []}\n```') == '{"cards": []}'


def test_extract_falls_back_to_raw_text():
    assert extract_json_text('{"cards": []}') == '{"cards": []}'


@pytest.mark.parametrize("text", ["not json at all", "[1, 2]", '{"cards": "nope"}'])
def test_parse_errors(text):
    with pytest.raises(ParseError) as exc:
        parse_model_response(text)
    assert PARSE_ERROR_MARKER in str(exc.value)


# ================================================================
# Card normalization
# ================================================================

@pytest.mark.parametrize("variant,expected", [
    ("filled", "highlight"),
    ("outlined", "standard"),
    ("alert", "alert"),
    ("success", "success"),
    ("highlight", "highlight"),
    ("standard", "standard"),
    ("neon-glow", "standard"),
    (None, "standard"),
    (5, "standard"),
])
def test_map_card_variant(variant, expected):
    assert map_card_variant(variant) == expected


def test_legacy_fields_use_lowest_priority_number():
    cards = [RawInsightCard(**c) for c in PREMIUM_CARDS]
    legacy = map_legacy_fields(cards)
    assert legacy == {
        "primary_issue": "Early sequence issue",
        "reason": "Missing left",
        "practice_focus": "Hole 7 trouble",
        "management_tip": "Back nine fade",
    }


def test_legacy_fields_missing_priority_loses():
    cards = [RawInsightCard(type="pattern", content="no priority"),
             RawInsightCard(type="pattern", content="ranked", priority=9)]
    assert map_legacy_fields(cards)["reason"] == "ranked"


def test_premium_payload():
    payload = _premium("```json\n" + json.dumps({"cards": PREMIUM_CARDS}) + "\n```")

    assert not payload.is_fallback
    assert payload.summary == "Solid round overall"
    assert payload.primary_issue == "Early sequence issue"
    assert payload.progress == "null"
    assert payload.product_access == "product_a"
    assert payload.analyzed_rounds == ["r1", "r2"]

    cards = payload.tiered_insights
    assert [c.variant for c in cards] == ["highlight", "standard", "standard", "alert", "standard", "success"]
    assert cards[0].icon_name == "trophy-outline"
    assert cards[1].icon_name == "analytics-outline"
    assert all(c.use_premium_button is None for c in cards)


def test_premium_payload_without_cards():
    payload = _premium('{"cards": []}')
    assert payload.tiered_insights == []
    assert payload.summary
    assert payload.primary_issue is None


def test_basic_payload_marks_only_teasers():
    cards = [
        _card("s", "summary", 1, "One real insight"),
        _card("p1", "premium-feature", 2, cta_text="See your miss pattern"),
        _card("p2", "premium-feature", 3),
    ]
    payload = _basic(json.dumps({"cards": cards}))

    assert payload.summary == "One real insight"
    assert payload.product_access is None
    assert payload.primary_issue == BASIC_LEGACY_PLACEHOLDERS["primary_issue"]

    summary, teaser, plain_teaser = payload.tiered_insights
    assert summary.use_premium_button is False
    assert summary.product_id is None
    assert summary.cta_text is None
    assert teaser.use_premium_button is True
    assert teaser.product_id == "product_a"
    assert teaser.cta_text == "See your miss pattern"
    assert plain_teaser.cta_text == DEFAULT_CTA_TEXT

    wire = payload.to_wire()
    assert wire["productAccess"] is None
    assert wire["tieredInsights"][1]["usePremiumButton"] is True


def test_unparseable_answer_becomes_fallback():
    payload = _premium("I'm sorry, I can't produce JSON today.")
    assert payload.is_fallback
    assert payload.error == PARSE_ERROR_MARKER
    assert payload.raw_response == "I'm sorry, I can't produce JSON today."
    assert payload.product_access == "product_a"
    assert payload.tiered_insights is None

    assert _basic("nope").product_access is None


# ================================================================
# Prompts
# ================================================================

def test_premium_prompt_mentions_rounds_and_handicap():
    prompt = build_premium_prompt(5, 12.5)
    assert "12.5 handicap" in prompt
    assert '"cards"' in prompt


def test_basic_prompt_without_handicap():
    prompt = build_basic_prompt(1)
    assert "handicap golfer" not in prompt
    assert "premium-feature" in prompt


def test_full_prompt_embeds_data():
    full = build_full_prompt("Analyse this.", {"rounds": [], "totalRounds": 0})
    assert full.startswith("Analyse this.")
    assert full.endswith('Golf rounds data: {"rounds": [], "totalRounds": 0}')


# ================================================================
# Loosely typed model output
# ================================================================

def test_mistyped_card_fields_keep_every_card():
    cards = [
        _card("1", "summary", 1, "Good ball striking", icon={"name": "golf"}),
        _card("2", "sequence", "high", "Tee shots leak right", icon="golf-outline", variant=["alert"]),
        {"id": 3, "title": 18, "content": "Hole 18 costs you", "type": "spatial", "priority": "2"},
        "stray text",
    ]
    payload = _premium(json.dumps({"cards": cards}))

    assert payload.error is None
    assert [c.id for c in payload.tiered_insights] == ["1", "2", "3"]

    mistyped = payload.tiered_insights[1]
    assert mistyped.icon_name == "analytics-outline"
    assert mistyped.variant == "standard"
    assert payload.tiered_insights[2].title == "18"
    assert payload.primary_issue == "Tee shots leak right"
    assert payload.practice_focus == "Hole 18 costs you"


def test_non_numeric_priority_ranks_last():
    parsed = parse_model_response(json.dumps({"cards": [
        _card("a", "pattern", "urgent", "unranked"),
        _card("b", "pattern", "7", "ranked"),
    ]}))
    assert parsed.cards[0].priority is None
    assert parsed.cards[1].priority == 7.0
    assert map_legacy_fields(parsed.cards)["reason"] == "ranked"
