"""Supabase remote store."""

import logging
from datetime import datetime
from typing import Any, Optional
import httpx
from pydantic import ValidationError
from backend.models.activity import StoredActivityLog, StoredDailySummary
from backend.services.errors import RemoteStoreError

logger = logging.getLogger(__name__)


def _remote_timestamp(value: Optional[datetime]) -> Optional[str]:
    """Serialize a local wall-clock time with its UTC offset."""
    return value.astimezone().isoformat() if value else None


class SupabaseRemoteStore:
    """Remote copy of logs and summaries in Supabase tables, via its REST API."""

    LOGS_TABLE = "activity_logs"
    SUMMARIES_TABLE = "daily_summaries"

    def __init__(
        self,
        url: str,
        api_key: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the remote store.

        Args:
            url: Supabase project URL
            api_key: Project API key
            timeout: Seconds per request
            transport: Optional httpx transport (used by tests)
        """
        self.client = httpx.AsyncClient(
            base_url=f"{url.rstrip('/')}/rest/v1",
            headers={
                "apikey": api_key,
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )

    async def close(self):
        await self.client.aclose()

    @staticmethod
    def log_to_row(log: StoredActivityLog) -> dict[str, Any]:
        return {
            "id": log.id,
            "activity_id": log.activity_id,
            "activity_name": log.activity_name,
            "hourly_value": log.hourly_value,
            "block_value": log.block_value,
            "time_slot_start": _remote_timestamp(log.time_slot_start),
            "time_slot_end": _remote_timestamp(log.time_slot_end),
            "logged_at": _remote_timestamp(log.logged_at or datetime.now()),
            "device_id": log.device_id,
        }

    @staticmethod
    def row_to_log(row: dict[str, Any]) -> StoredActivityLog:
        return StoredActivityLog(
            id=row["id"],
            activity_id=row.get("activity_id") or "",
            activity_name=row["activity_name"],
            hourly_value=row["hourly_value"],
            block_value=row["block_value"],
            time_slot_start=row["time_slot_start"],
            time_slot_end=row["time_slot_end"],
            logged_at=row.get("logged_at"),
            device_id=row.get("device_id"),
        )

    @staticmethod
    def summary_to_row(summary: StoredDailySummary) -> dict[str, Any]:
        return {
            "id": summary.id,
            "date": summary.date,
            "total_value": summary.total_value,
            "activity_count": summary.activity_count,
            "computed_at": _remote_timestamp(summary.computed_at),
            "device_id": summary.device_id,
        }

    async def _upsert(self, table: str, row: dict[str, Any]) -> None:
        try:
            response = await self.client.post(
                f"/{table}",
                json=row,
                headers={"Prefer": "resolution=merge-duplicates,return=minimal"},
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise RemoteStoreError(
                f"{table} upsert of {row['id']} rejected ({e.response.status_code}): {e.response.text}"
            )
        except httpx.HTTPError as e:
            raise RemoteStoreError(f"{table} upsert of {row['id']} failed: {e}")

    async def upsert_log(self, log: StoredActivityLog) -> None:
        """
        Insert or replace a log remotely.

        Raises:
            RemoteStoreError: On network or validation failure
        """
        await self._upsert(self.LOGS_TABLE, self.log_to_row(log))

    async def upsert_summary(self, summary: StoredDailySummary) -> None:
        await self._upsert(self.SUMMARIES_TABLE, self.summary_to_row(summary))

    async def fetch_logs_for_device(self, device_id: str) -> list[StoredActivityLog]:
        """
        Fetch every remote log written by a device.

        Args:
            device_id: Device identifier of the local store

        Returns:
            Parsed logs; malformed rows are skipped

        Raises:
            RemoteStoreError: If the request fails
        """
        try:
            response = await self.client.get(
                f"/{self.LOGS_TABLE}",
                params={"select": "*", "device_id": f"eq.{device_id}"},
            )
            response.raise_for_status()
            rows = response.json()
        except httpx.HTTPError as e:
            raise RemoteStoreError(f"Failed to fetch remote logs: {e}")
        except ValueError as e:
            raise RemoteStoreError(f"Remote store returned invalid JSON: {e}")

        logs = []
        skipped = 0
        for row in rows:
            try:
                logs.append(self.row_to_log(row))
            except (KeyError, TypeError, ValidationError) as e:
                skipped += 1
                logger.warning(f"Skipping malformed remote log {row.get('id')!r}: {e}")

        logger.info(f"Fetched {len(logs)} remote logs for {device_id} ({skipped} skipped)")
        return logs
