"""Data models for the application."""

from .activity import Activity, TimeSlot, StoredActivityLog, StoredDailySummary
from .stats import (
    ActivityTotals,
    ConnectionStatus,
    PeriodStats,
    PullResult,
    PushResult,
    RankedActivity,
    StorageStats,
    SyncStatus,
    TierTotals,
    TopActivity,
    TrendPoint,
    Trends,
)

__all__ = [
    "Activity",
    "TimeSlot",
    "StoredActivityLog",
    "StoredDailySummary",
    "ActivityTotals",
    "ConnectionStatus",
    "PeriodStats",
    "PullResult",
    "PushResult",
    "RankedActivity",
    "StorageStats",
    "SyncStatus",
    "TierTotals",
    "TopActivity",
    "TrendPoint",
    "Trends",
]
