"""Shared fixtures."""

from datetime import date, datetime
from typing import Optional
import pytest
from backend.config import DEFAULT_CATALOG_PATH
from backend.models.activity import Activity, StoredActivityLog, StoredDailySummary, block_value_for
from backend.services import ActivityCatalog, JsonFileStorage, LedgerBinder, SlotGenerator

DAY = date(2024, 3, 12)


def make_log(
    index: int,
    hourly_value: int,
    name: str = "Deep work",
    day: date = DAY,
    device_id: Optional[str] = "device_test",
) -> StoredActivityLog:
    """Log of the ``index``-th half-hour slot of ``day``."""
    slot = SlotGenerator().generate_slots(day)[index]
    return StoredActivityLog(
        id=slot.id,
        activity_id=f"{hourly_value}_0",
        activity_name=name,
        hourly_value=hourly_value,
        block_value=block_value_for(hourly_value),
        time_slot_start=slot.start_time,
        time_slot_end=slot.end_time,
        logged_at=datetime(2024, 3, 12, 23, 0),
        device_id=device_id,
    )


class FakeRemoteStore:
    """In-memory remote store; ids listed in ``failing_ids`` are rejected."""

    def __init__(self, failing_ids: tuple[str, ...] = ()):
        self.logs: dict[str, StoredActivityLog] = {}
        self.summaries: dict[str, StoredDailySummary] = {}
        self.failing_ids = set(failing_ids)

    async def upsert_log(self, log: StoredActivityLog) -> None:
        if log.id in self.failing_ids:
            raise ConnectionError("remote rejected the record")
        self.logs[log.id] = log

    async def upsert_summary(self, summary: StoredDailySummary) -> None:
        self.summaries[summary.id] = summary

    async def fetch_logs_for_device(self, device_id: str) -> list[StoredActivityLog]:
        return [log for log in self.logs.values() if log.device_id == device_id]


@pytest.fixture
def catalog() -> ActivityCatalog:
    return ActivityCatalog.from_file(DEFAULT_CATALOG_PATH)


@pytest.fixture
def small_catalog() -> ActivityCatalog:
    return ActivityCatalog(
        [
            Activity(id="20000_0", name="Client work", category="High Value", hourly_value=20000),
            Activity(id="0_0", name="Sleep", category="Free", hourly_value=0),
            Activity(id="-5000_0", name="Doomscrolling", category="Negative", hourly_value=-5000),
        ]
    )


@pytest.fixture
def storage(tmp_path) -> JsonFileStorage:
    return JsonFileStorage(tmp_path / "pine.json")


@pytest.fixture
def binder(storage, small_catalog) -> LedgerBinder:
    return LedgerBinder(storage, small_catalog)


@pytest.fixture
def remote() -> FakeRemoteStore:
    return FakeRemoteStore()
