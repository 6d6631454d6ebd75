"""
Client scoring package.

Combines signal sub-scores into an overall score, churn risk and insights.
"""

from .service import (
    DEFAULT_WEIGHTS,
    ClientScorer,
    SignalWeights,
    build_insights,
    classify_churn_risk,
)

__all__ = [
    "DEFAULT_WEIGHTS",
    "ClientScorer",
    "SignalWeights",
    "build_insights",
    "classify_churn_risk",
]
