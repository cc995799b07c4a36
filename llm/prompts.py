import json
from typing import Any, Dict, Optional


# ================================================================
# Shared prompt fragments
# ================================================================

_DATA_DESCRIPTION = """
Each round lists its holes in order. Every hole carries its shots with a type
(Tee Shot, Long Shot, Approach, Chip, Putts, Sand, Penalties), a quality
assessment (On Target / Slightly Off / Recovery Needed) and, where recorded, a
timestamp, so the flow of each hole can be reconstructed shot by shot. The
"shots" matrix of each round totals these per type and result. Course details
are included when known; use what you know about those courses and holes."""

_CARD_FIELDS = """
    "id": string,           // unique identifier for the card
    "title": string,        // short title describing the insight
    "content": string,      // the insight itself
    "priority": number,     // display order, 1 is most important
    "icon": {
      "name": string,       // Ionicons icon name
      "color": string       // optional hex color
    },
    "variant": string"""    # closed below, per prompt

_RENDERING_GUIDELINES = """
FORMATTING FOR A MOBILE SCREEN:
- Bullet lists of 3-5 items for technique points, each preceded by one line of context
- Numbered lists for drills and step-by-step routines, with a time estimate where useful
- At most one emoji per major idea, never clustered
- No blockquotes; write coach quotes inline, e.g. "Tempo beats power" - Coach 🏆
- Paragraphs of no more than three short lines"""


def _describe_player(handicap: Optional[float]) -> str:
    """Player description for the prompt; omits the handicap when unknown."""
    if handicap is None:
        return "a golfer"
    return f"a {handicap:g} handicap golfer"


def _json_contract(card_types: str, extra_fields: str = "") -> str:
    return (
        "\nReturn your insights as a single JSON object with this structure:\n"
        "{\n"
        '  "cards": [{'
        + _CARD_FIELDS
        + ',   // "standard", "highlight", "alert" or "success"\n'
        + f'    "type": string          // {card_types}'
        + extra_fields
        + "\n  }]\n"
        "}\n"
    )


# ================================================================
# Entitled players: full multi-round coaching analysis
# ================================================================

def build_premium_prompt(total_rounds: int, handicap: Optional[float] = None) -> str:
    """Coaching prompt for players entitled to full insights."""
    return (
        "You are a PGA-certified golf coach who specializes in statistical analysis "
        "and course management. Find the few changes that would save this player the "
        "most strokes, and make every insight specific, realistic and actionable.\n\n"
        f"Below is shot-by-shot data from {total_rounds} recent rounds by "
        f"{_describe_player(handicap)}."
        + _DATA_DESCRIPTION
        + """

Analyse the data along these dimensions:

1. SHOT SEQUENCES: how each shot sets up the next (e.g. a missed tee shot forcing a
   recovery long shot and a harder approach); sequences that repeatedly cost strokes;
   how recovery shots compound across holes. Explain the downstream effect of each
   issue and what to do about it.
2. COURSE AWARENESS: relate performance to the specific courses, hole layouts and
   features, and what they imply for strategy.
3. TIMING: early versus late round performance, fatigue or concentration drops, and
   effects of time of day or round duration.
4. PROGRESSION: a forward-looking improvement roadmap in a coach's voice, with
   concrete practice routines for the issues found and realistic next steps.
5. ROOT CAUSES: reasonable causal inferences (e.g. three-putts following poor
   approaches), told as a chain of events, and how to break that chain.

Stay grounded in the data: infer where it is reasonable, but do not invent
techniques or details the data does not support. Prefer the insights with the
largest effect on scoring.
"""
        + _RENDERING_GUIDELINES
        + _json_contract('"sequence", "spatial", "temporal" or "pattern"')
        + """
Produce as many cards as the analysis warrants, ordered by the priority field. The
first card is a summary: open with one sentence capturing the character of the most
recent round the way a coach would put it, then summarize recent rounds, trends and
how to improve. Every following card covers one specific aspect of the player's game.
"""
    )


# ================================================================
# Not entitled: one real summary plus premium teasers
# ================================================================

def build_basic_prompt(total_rounds: int, handicap: Optional[float] = None) -> str:
    """Preview prompt for players without the insights product."""
    return (
        "You are a professional golf coach giving basic insights to a free user. "
        "Give genuinely useful analysis while showing what premium insights would add.\n\n"
        f"Below is LIMITED data: {total_rounds} recent round by "
        f"{_describe_player(handicap)}. Premium subscribers get analysis across their "
        "5 most recent rounds, which allows much stronger pattern detection."
        + _DATA_DESCRIPTION
        + """

Create:
1. One "summary" card with real, useful insight from the data available.
2. Four "premium-feature" cards, each previewing an advanced insight that premium
   analysis would deliver. Show a glimpse of what could be learned without giving
   the full answer, and give each a different call to action (e.g. fear of missing
   out, desire to improve, competitive edge). Stress how much more accurate the
   analysis becomes with more rounds of data.

Keep the tone professional and focused on value; be clear about the limits of this
analysis without resorting to aggressive sales language.
"""
        + _json_contract(
            '"summary" or "premium-feature"',
            ',\n    "cta_text": string      // upgrade call to action, premium-feature cards only',
        )
        + "\nCreate exactly one summary card and four premium-feature cards.\n"
    )


def build_full_prompt(prompt: str, golf_data: Dict[str, Any]) -> str:
    """Append the serialized golf data to an instruction prompt."""
    return f"{prompt}\n\nGolf rounds data: {json.dumps(golf_data, default=str)}"
