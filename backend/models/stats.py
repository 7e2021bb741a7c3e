"""Derived statistics and sync result models."""

from datetime import date, datetime
from typing import Optional
from pydantic import BaseModel, Field


class ActivityTotals(BaseModel):
    """Hours, value and slot count accumulated for one activity."""

    hours: float = 0.0
    value: float = 0.0
    count: int = 0


class TopActivity(BaseModel):
    name: str
    hours: float
    value: float


class TierTotals(BaseModel):
    """Totals for one value tier."""

    tier: str
    label: str
    hours: float = 0.0
    value: float = 0.0
    activity_count: int = 0


class PeriodStats(BaseModel):
    """Aggregate over the logs of one day, week or month."""

    period: str
    start_date: datetime
    end_date: datetime
    total_hours: float = Field(0.0, description="Logged hours in the period")
    total_value: float = Field(0.0, description="Sum of block values")
    avg_hourly_value: float = 0.0
    efficiency: int = Field(0, description="Percent of logged hours with positive value")
    high_value_hours: float = 0.0
    zero_value_hours: float = 0.0
    top_activity: Optional[TopActivity] = None
    activity_breakdown: dict[str, ActivityTotals] = Field(default_factory=dict)
    value_breakdown: list[TierTotals] = Field(default_factory=list)
    growth: int = Field(0, description="Percent change vs. the preceding period")
    weekly_growth: int = 0
    monthly_growth: int = 0


class TrendPoint(BaseModel):
    label: str
    start: date
    end: date
    value: float


class Trends(BaseModel):
    """Value per day over the last week and per week over the last month."""

    daily: list[TrendPoint]
    weekly: list[TrendPoint]


class RankedActivity(BaseModel):
    rank: int
    name: str
    hours: float
    value: float
    sessions: int
    avg_session_value: int


class PushResult(BaseModel):
    success: bool
    synced: int
    errors: list[str] = Field(default_factory=list)


class PullResult(BaseModel):
    success: bool
    fetched: int
    errors: list[str] = Field(default_factory=list)


class ConnectionStatus(BaseModel):
    connected: bool
    error: Optional[str] = None


class StorageStats(BaseModel):
    total_activity_logs: int = 0
    total_daily_summaries: int = 0
    oldest_log_date: Optional[datetime] = None
    newest_log_date: Optional[datetime] = None
    total_storage_size: int = Field(0, description="Approximate size in bytes")


class SyncStatus(BaseModel):
    last_sync_time: Optional[datetime] = None
    local_logs: int = 0
    local_summaries: int = 0
    sync_in_progress: bool = False
