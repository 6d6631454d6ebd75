"""
Signal extraction package.

Turns raw per-client record sets into normalized 0-100 sub-scores.
"""

from .extractors import (
    EXTRACTORS,
    activity_sub_score,
    content_sub_score,
    extract_sub_scores,
    milestone_sub_score,
    session_sub_score,
    workout_sub_score,
)

__all__ = [
    "EXTRACTORS",
    "activity_sub_score",
    "content_sub_score",
    "extract_sub_scores",
    "milestone_sub_score",
    "session_sub_score",
    "workout_sub_score",
]
