from .shot_summary import (
    SHOT_RESULT_ORDER,
    SHOT_TYPE_ORDER,
    build_golf_data,
    empty_shot_tally,
    hole_detail,
    hole_time_info,
    summarize_round,
    tally_shots,
)

__all__ = [
    "SHOT_RESULT_ORDER",
    "SHOT_TYPE_ORDER",
    "build_golf_data",
    "empty_shot_tally",
    "hole_detail",
    "hole_time_info",
    "summarize_round",
    "tally_shots",
]
