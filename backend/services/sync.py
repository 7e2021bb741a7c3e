"""Push/pull reconciliation between the local store and the remote store."""

import asyncio
import logging
from datetime import datetime
from typing import Optional
from backend.models.stats import ConnectionStatus, PullResult, PushResult, SyncStatus
from backend.services.ports import LogStorage, RemoteStore

logger = logging.getLogger(__name__)


class SyncState:
    """In-progress flag shared by everything that may start a push."""

    def __init__(self):
        self.in_progress = False

    def try_acquire(self) -> bool:
        if self.in_progress:
            return False
        self.in_progress = True
        return True

    def release(self):
        self.in_progress = False


class SyncReconciler:
    """Mirror local logs and summaries to the remote store and merge them back."""

    def __init__(self, storage: LogStorage, remote: RemoteStore, state: Optional[SyncState] = None):
        """
        Initialize the reconciler.

        Args:
            storage: Local store, the source of truth
            remote: Remote store receiving the copies
            state: Shared in-progress flag (default: a private one)
        """
        self.storage = storage
        self.remote = remote
        self.state = state or SyncState()
        self._auto_sync_task: Optional[asyncio.Task] = None

    async def push(self) -> PushResult:
        """
        Upsert every local log, then every daily summary, to the remote store.

        Per-item failures are collected and do not stop the batch. Only one
        push runs at a time; a concurrent call returns immediately.

        Returns:
            PushResult with the number of upserted records and the error messages
        """
        if not self.state.try_acquire():
            return PushResult(success=False, synced=0, errors=["Sync already in progress"])

        synced = 0
        errors: list[str] = []
        try:
            logs = await self.storage.get_all_logs()
            logger.info(f"Pushing {len(logs)} activity logs")
            for log in logs:
                try:
                    await self.remote.upsert_log(log)
                    synced += 1
                except Exception as e:
                    message = f"Failed to sync log {log.id}: {e}"
                    errors.append(message)
                    logger.error(message)

            summaries = await self.storage.get_all_summaries()
            logger.info(f"Pushing {len(summaries)} daily summaries")
            for summary in summaries:
                try:
                    await self.remote.upsert_summary(summary)
                    synced += 1
                except Exception as e:
                    message = f"Failed to sync summary {summary.id}: {e}"
                    errors.append(message)
                    logger.error(message)

            await self.storage.set_last_sync_time(datetime.now())
            logger.info(f"Sync completed: {synced} records pushed, {len(errors)} errors")
            return PushResult(success=not errors, synced=synced, errors=errors)

        except Exception as e:
            message = f"Sync process failed: {e}"
            errors.append(message)
            logger.error(message)
            return PushResult(success=False, synced=synced, errors=errors)
        finally:
            self.state.release()

    async def pull_and_merge(self) -> PullResult:
        """
        Fetch this device's remote logs and add the ones missing locally.

        A local record always wins over a remote one with the same id, so
        repeating the pull adds nothing.

        Returns:
            PullResult with the number of merged records
        """
        try:
            device_id = await self.storage.get_device_id()
            remote_logs = await self.remote.fetch_logs_for_device(device_id)
            local_ids = {log.id for log in await self.storage.get_all_logs()}
            missing = [log for log in remote_logs if log.id not in local_ids]

            fetched = await self.storage.append_logs(missing) if missing else 0
            logger.info(f"Pulled {len(remote_logs)} remote logs, merged {fetched}")
            return PullResult(success=True, fetched=fetched)

        except Exception as e:
            message = f"Failed to fetch from remote store: {e}"
            logger.error(message)
            return PullResult(success=False, fetched=0, errors=[message])

    async def test_connection(self) -> ConnectionStatus:
        """Probe the remote store with a read; never raises."""
        try:
            device_id = await self.storage.get_device_id()
            await self.remote.fetch_logs_for_device(device_id)
            return ConnectionStatus(connected=True)
        except Exception as e:
            logger.warning(f"Remote store connection failed: {e}")
            return ConnectionStatus(connected=False, error=str(e))

    async def get_status(self) -> SyncStatus:
        return SyncStatus(
            last_sync_time=await self.storage.get_last_sync_time(),
            local_logs=len(await self.storage.get_all_logs()),
            local_summaries=len(await self.storage.get_all_summaries()),
            sync_in_progress=self.state.in_progress,
        )

    async def start_auto_sync(self, interval_seconds: float):
        """Start a background task pushing every ``interval_seconds``."""
        if self._auto_sync_task is None:
            self._auto_sync_task = asyncio.create_task(self._auto_sync(interval_seconds))
            logger.info(f"Auto sync every {interval_seconds}s")

    async def stop_auto_sync(self):
        if self._auto_sync_task is None:
            return
        self._auto_sync_task.cancel()
        try:
            await self._auto_sync_task
        except asyncio.CancelledError:
            pass
        self._auto_sync_task = None

    async def _auto_sync(self, interval_seconds: float):
        while True:
            await asyncio.sleep(interval_seconds)
            try:
                result = await self.push()
                if not result.success:
                    logger.warning(f"Auto sync finished with errors: {result.errors}")
            except Exception as e:
                logger.error(f"Error in auto sync task: {e}")
