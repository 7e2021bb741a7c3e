"""Contracts of the collaborators the ledger depends on."""

from datetime import date, datetime
from typing import Optional, Protocol
from backend.models.activity import Activity, StoredActivityLog, StoredDailySummary


class LogStorage(Protocol):
    """Local, offline-first store of activity logs and daily summaries."""

    async def get_logs_for_date(self, day: date) -> list[StoredActivityLog]: ...

    async def get_all_logs(self) -> list[StoredActivityLog]: ...

    async def save_log(self, log: StoredActivityLog) -> None: ...

    async def append_logs(self, logs: list[StoredActivityLog]) -> int: ...

    async def delete_log(self, log_id: str) -> None: ...

    async def get_all_summaries(self) -> list[StoredDailySummary]: ...

    async def save_summary(self, summary: StoredDailySummary) -> None: ...

    async def get_last_sync_time(self) -> Optional[datetime]: ...

    async def set_last_sync_time(self, timestamp: datetime) -> None: ...

    async def get_device_id(self) -> str: ...


class RemoteStore(Protocol):
    """Remote copy of the logs, keyed by log id plus device id."""

    async def upsert_log(self, log: StoredActivityLog) -> None: ...

    async def upsert_summary(self, summary: StoredDailySummary) -> None: ...

    async def fetch_logs_for_device(self, device_id: str) -> list[StoredActivityLog]: ...


class ActivityLookup(Protocol):
    def get_by_id(self, activity_id: str) -> Optional[Activity]: ...

    def get_all(self) -> list[Activity]: ...
