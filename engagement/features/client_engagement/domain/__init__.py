"""
Domain types for client engagement scoring.
"""

from .errors import (
    BatchTimeoutError,
    ClientListFetchError,
    ClientNotFoundError,
    EngagementError,
    SignalFetchError,
)
from .models import (
    ActivityEvent,
    CacheInfo,
    ChurnRisk,
    ChurnRiskDistribution,
    Client,
    ContentView,
    EngagementReport,
    EngagementScore,
    LinkedSession,
    MilestoneUnlock,
    SessionBooking,
    SignalKind,
    SignalRecord,
    SignalSnapshot,
    WorkoutCompletion,
)

__all__ = [
    "ActivityEvent",
    "BatchTimeoutError",
    "CacheInfo",
    "ChurnRisk",
    "ChurnRiskDistribution",
    "Client",
    "ClientListFetchError",
    "ClientNotFoundError",
    "ContentView",
    "EngagementError",
    "EngagementReport",
    "EngagementScore",
    "LinkedSession",
    "MilestoneUnlock",
    "SessionBooking",
    "SignalFetchError",
    "SignalKind",
    "SignalRecord",
    "SignalSnapshot",
    "WorkoutCompletion",
]
