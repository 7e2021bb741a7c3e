"""Local JSON storage for activity logs and daily summaries."""

import json
import logging
import os
import secrets
import time
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Any, Optional
from pydantic import ValidationError
from backend.models.activity import StoredActivityLog, StoredDailySummary
from backend.models.stats import StorageStats
from backend.services.errors import StorageError

logger = logging.getLogger(__name__)


class JsonFileStorage:
    """
    Key-value store kept in a single JSON document.

    Keys mirror the records the ledger persists: activity logs, daily
    summaries, the last sync timestamp and the device identifier.
    """

    ACTIVITY_LOGS = "activity_logs"
    DAILY_SUMMARIES = "daily_summaries"
    LAST_SYNC = "last_sync"
    DEVICE_ID = "device_id"

    def __init__(self, path: Path):
        """
        Initialize storage.

        Args:
            path: JSON file to read and write; created on first write
        """
        self.path = Path(path)

    def _read(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise StorageError(f"Failed to read {self.path}: {e}")
        if not isinstance(data, dict):
            raise StorageError(f"{self.path} does not hold a JSON object")
        return data

    def _write(self, data: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            os.replace(tmp_path, self.path)
        except OSError as e:
            raise StorageError(f"Failed to write {self.path}: {e}")

    def _load_logs(self, data: dict[str, Any]) -> list[StoredActivityLog]:
        logs = []
        for raw in data.get(self.ACTIVITY_LOGS, []):
            try:
                logs.append(StoredActivityLog.model_validate(raw))
            except ValidationError as e:
                logger.warning(f"Skipping invalid stored log {raw.get('id')!r}: {e}")
        return logs

    def _load_summaries(self, data: dict[str, Any]) -> list[StoredDailySummary]:
        summaries = []
        for raw in data.get(self.DAILY_SUMMARIES, []):
            try:
                summaries.append(StoredDailySummary.model_validate(raw))
            except ValidationError as e:
                logger.warning(f"Skipping invalid daily summary {raw.get('id')!r}: {e}")
        return summaries

    @staticmethod
    def _dump(records: list) -> list[dict]:
        return [record.model_dump(mode="json") for record in records]

    # Activity logs

    async def get_all_logs(self) -> list[StoredActivityLog]:
        return self._load_logs(self._read())

    async def get_logs_for_date(self, day: date) -> list[StoredActivityLog]:
        logs = await self.get_all_logs()
        return [log for log in logs if log.time_slot_start.date() == day]

    async def get_logs_in_range(self, start: datetime, end: datetime) -> list[StoredActivityLog]:
        logs = await self.get_all_logs()
        return [log for log in logs if start <= log.time_slot_start <= end]

    async def save_log(self, log: StoredActivityLog) -> None:
        """Insert ``log`` or replace the record with the same id."""
        data = self._read()
        logs = [existing for existing in self._load_logs(data) if existing.id != log.id]
        logs.append(log)
        data[self.ACTIVITY_LOGS] = self._dump(logs)
        self._write(data)

    async def append_logs(self, logs: list[StoredActivityLog]) -> int:
        """
        Add logs whose id is not stored yet; existing records are kept as they are.

        Returns:
            Number of records added
        """
        data = self._read()
        existing = self._load_logs(data)
        known_ids = {log.id for log in existing}

        added = []
        for log in logs:
            if log.id in known_ids:
                continue
            known_ids.add(log.id)
            added.append(log)

        if added:
            merged = sorted(existing + added, key=lambda log: log.time_slot_start)
            data[self.ACTIVITY_LOGS] = self._dump(merged)
            self._write(data)
        return len(added)

    async def delete_log(self, log_id: str) -> None:
        data = self._read()
        logs = self._load_logs(data)
        remaining = [log for log in logs if log.id != log_id]
        if len(remaining) != len(logs):
            data[self.ACTIVITY_LOGS] = self._dump(remaining)
            self._write(data)

    # Daily summaries

    async def get_all_summaries(self) -> list[StoredDailySummary]:
        """All daily summaries, newest date first."""
        summaries = self._load_summaries(self._read())
        return sorted(summaries, key=lambda s: s.date, reverse=True)

    async def save_summary(self, summary: StoredDailySummary) -> None:
        """Insert ``summary`` or replace the one stored for the same date."""
        data = self._read()
        summaries = [s for s in self._load_summaries(data) if s.date != summary.date]
        summaries.append(summary)
        data[self.DAILY_SUMMARIES] = self._dump(summaries)
        self._write(data)

    # Sync bookkeeping

    async def get_last_sync_time(self) -> Optional[datetime]:
        value = self._read().get(self.LAST_SYNC)
        return datetime.fromisoformat(value) if value else None

    async def set_last_sync_time(self, timestamp: datetime) -> None:
        data = self._read()
        data[self.LAST_SYNC] = timestamp.isoformat()
        self._write(data)

    async def get_device_id(self) -> str:
        """Get the identifier of this install, creating it on first use."""
        data = self._read()
        device_id = data.get(self.DEVICE_ID)
        if not device_id:
            device_id = f"device_{int(time.time() * 1000)}_{secrets.token_hex(5)}"
            data[self.DEVICE_ID] = device_id
            self._write(data)
            logger.info(f"Created device id {device_id}")
        return device_id

    # Maintenance

    async def get_storage_stats(self) -> StorageStats:
        data = self._read()
        logs = self._load_logs(data)
        starts = sorted(log.time_slot_start for log in logs)
        size = len(json.dumps(data.get(self.ACTIVITY_LOGS, []))) + len(
            json.dumps(data.get(self.DAILY_SUMMARIES, []))
        )
        return StorageStats(
            total_activity_logs=len(logs),
            total_daily_summaries=len(self._load_summaries(data)),
            oldest_log_date=starts[0] if starts else None,
            newest_log_date=starts[-1] if starts else None,
            total_storage_size=size,
        )

    async def export_all_data(self) -> dict[str, Any]:
        """Snapshot of every record for backup."""
        return {
            "activity_logs": self._dump(await self.get_all_logs()),
            "daily_summaries": self._dump(await self.get_all_summaries()),
            "device_id": await self.get_device_id(),
            "exported_at": datetime.now().isoformat(),
        }

    async def cleanup_old_data(self, days_to_keep: int = 90) -> int:
        """
        Remove logs and summaries older than ``days_to_keep`` days.

        Returns:
            Number of records removed
        """
        cutoff = datetime.now() - timedelta(days=days_to_keep)
        data = self._read()
        logs = self._load_logs(data)
        summaries = self._load_summaries(data)

        recent_logs = [log for log in logs if log.time_slot_start >= cutoff]
        recent_summaries = [s for s in summaries if s.date >= cutoff.date().isoformat()]
        removed = (len(logs) - len(recent_logs)) + (len(summaries) - len(recent_summaries))

        if removed:
            data[self.ACTIVITY_LOGS] = self._dump(recent_logs)
            data[self.DAILY_SUMMARIES] = self._dump(recent_summaries)
            self._write(data)
            logger.info(f"Removed {removed} records older than {cutoff.date()}")
        return removed

    async def clear_all_data(self) -> None:
        """Drop logs and summaries; the device id and last sync time are kept."""
        data = self._read()
        data.pop(self.ACTIVITY_LOGS, None)
        data.pop(self.DAILY_SUMMARIES, None)
        self._write(data)
