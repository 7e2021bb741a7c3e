"""Activity, slot and log data models."""

from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

SLOT_MINUTES = 30


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero."""
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def block_value_for(hourly_value: float, slot_minutes: int = SLOT_MINUTES) -> int:
    """Value of a single slot for an activity worth ``hourly_value`` per hour."""
    return round_half_up(hourly_value * slot_minutes / 60)


def to_local_naive(value: datetime) -> datetime:
    """Convert an aware datetime to naive local wall-clock time."""
    if value.tzinfo is not None:
        return value.astimezone().replace(tzinfo=None)
    return value


class Activity(BaseModel):
    """Catalog entry for something a slot can be spent on."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    category: str
    hourly_value: int = Field(description="Signed value of one hour")
    search_tags: tuple[str, ...] = ()

    @property
    def block_value(self) -> int:
        return block_value_for(self.hourly_value)


class TimeSlot(BaseModel):
    """Fixed-width, half-open interval of a single day."""

    model_config = ConfigDict(frozen=True)

    id: str
    start_time: datetime
    end_time: datetime
    activity: Optional[Activity] = None
    value: int = 0

    @property
    def is_logged(self) -> bool:
        return self.activity is not None


class StoredActivityLog(BaseModel):
    """Persisted binding of an activity to a slot."""

    id: str = Field(description="Id of the slot this log was written for")
    activity_id: str = ""
    activity_name: str
    hourly_value: float
    block_value: float
    time_slot_start: datetime
    time_slot_end: datetime
    logged_at: Optional[datetime] = None
    device_id: Optional[str] = None

    @field_validator("time_slot_start", "time_slot_end", "logged_at")
    @classmethod
    def _local_time(cls, value: Optional[datetime]) -> Optional[datetime]:
        return to_local_naive(value) if value is not None else None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "slot_2025-01-15_18",
                "activity_id": "20000_0",
                "activity_name": "Client strategy session",
                "hourly_value": 20000,
                "block_value": 10000,
                "time_slot_start": "2025-01-15T09:00:00",
                "time_slot_end": "2025-01-15T09:30:00",
                "logged_at": "2025-01-15T09:31:12",
                "device_id": "device_1736933472000_3f9a1c2b7e",
            }
        }
    )


class StoredDailySummary(BaseModel):
    """Per-day totals derived from the logs of that day."""

    id: str
    date: str = Field(pattern=r"^\d{4}-\d{2}-\d{2}$")
    total_value: float
    activity_count: int
    computed_at: datetime
    device_id: Optional[str] = None

    @field_validator("computed_at")
    @classmethod
    def _local_time(cls, value: datetime) -> datetime:
        return to_local_naive(value)
