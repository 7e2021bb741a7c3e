"""Tests for the local JSON store."""

from datetime import date, datetime, timedelta
import pytest
from backend.models.activity import StoredDailySummary
from backend.services import JsonFileStorage, StorageError
from tests.conftest import DAY, make_log


def make_summary(day: str, total: float = 100.0) -> StoredDailySummary:
    return StoredDailySummary(
        id=f"summary_{day}_device_test",
        date=day,
        total_value=total,
        activity_count=1,
        computed_at=datetime(2024, 3, 12, 23, 0),
        device_id="device_test",
    )


class TestActivityLogs:
    @pytest.mark.asyncio
    async def test_empty_store(self, storage):
        assert await storage.get_all_logs() == []
        assert await storage.get_all_summaries() == []
        assert await storage.get_last_sync_time() is None

    @pytest.mark.asyncio
    async def test_save_and_read_back(self, storage):
        log = make_log(18, 20000)
        await storage.save_log(log)

        assert await storage.get_all_logs() == [log]
        assert await storage.get_logs_for_date(DAY) == [log]
        assert await storage.get_logs_for_date(DAY + timedelta(days=1)) == []

    @pytest.mark.asyncio
    async def test_save_replaces_same_id(self, storage):
        await storage.save_log(make_log(18, 20000))
        await storage.save_log(make_log(18, -5000, name="Doomscrolling"))

        logs = await storage.get_all_logs()
        assert len(logs) == 1
        assert logs[0].activity_name == "Doomscrolling"

    @pytest.mark.asyncio
    async def test_delete_log(self, storage):
        await storage.save_log(make_log(18, 20000))
        await storage.save_log(make_log(19, 0))
        await storage.delete_log("slot_2024-03-12_18")

        assert [log.id for log in await storage.get_all_logs()] == ["slot_2024-03-12_19"]

    @pytest.mark.asyncio
    async def test_append_logs_skips_known_ids(self, storage):
        local = make_log(18, 20000, name="Local")
        await storage.save_log(local)

        added = await storage.append_logs([make_log(18, 0, name="Remote"), make_log(10, 0), make_log(10, 0)])

        assert added == 1
        logs = await storage.get_all_logs()
        assert [log.id for log in logs] == ["slot_2024-03-12_10", "slot_2024-03-12_18"]
        assert logs[1].activity_name == "Local"

    @pytest.mark.asyncio
    async def test_get_logs_in_range_is_inclusive(self, storage):
        for index in (0, 18, 47):
            await storage.save_log(make_log(index, 100))

        logs = await storage.get_logs_in_range(datetime(2024, 3, 12, 0, 0), datetime(2024, 3, 12, 9, 0))
        assert [log.id for log in logs] == ["slot_2024-03-12_00", "slot_2024-03-12_18"]

    @pytest.mark.asyncio
    async def test_invalid_records_are_skipped(self, storage):
        storage.path.write_text(
            '{"activity_logs": [{"id": "broken"}, '
            + make_log(18, 20000).model_dump_json()
            + "]}"
        )
        logs = await storage.get_all_logs()
        assert [log.id for log in logs] == ["slot_2024-03-12_18"]

    @pytest.mark.asyncio
    async def test_corrupt_document_raises(self, storage):
        storage.path.write_text("{not json")
        with pytest.raises(StorageError):
            await storage.get_all_logs()

    @pytest.mark.asyncio
    async def test_non_object_document_raises(self, storage):
        storage.path.write_text("[]")
        with pytest.raises(StorageError):
            await storage.get_all_logs()

    @pytest.mark.asyncio
    async def test_persists_across_instances(self, storage):
        await storage.save_log(make_log(18, 20000))
        reopened = JsonFileStorage(storage.path)
        assert len(await reopened.get_all_logs()) == 1


class TestSummariesAndBookkeeping:
    @pytest.mark.asyncio
    async def test_summaries_newest_first_and_replaced_by_date(self, storage):
        await storage.save_summary(make_summary("2024-03-11"))
        await storage.save_summary(make_summary("2024-03-12", 100))
        await storage.save_summary(make_summary("2024-03-12", 250))

        summaries = await storage.get_all_summaries()
        assert [s.date for s in summaries] == ["2024-03-12", "2024-03-11"]
        assert summaries[0].total_value == 250

    @pytest.mark.asyncio
    async def test_last_sync_time(self, storage):
        when = datetime(2024, 3, 12, 10, 15, 30)
        await storage.set_last_sync_time(when)
        assert await storage.get_last_sync_time() == when

    @pytest.mark.asyncio
    async def test_device_id_is_created_once(self, storage):
        device_id = await storage.get_device_id()

        assert device_id.startswith("device_")
        assert await storage.get_device_id() == device_id
        assert await JsonFileStorage(storage.path).get_device_id() == device_id


class TestMaintenance:
    @pytest.mark.asyncio
    async def test_storage_stats(self, storage):
        await storage.save_log(make_log(30, 100))
        await storage.save_log(make_log(2, 100))
        await storage.save_summary(make_summary("2024-03-12"))

        stats = await storage.get_storage_stats()
        assert stats.total_activity_logs == 2
        assert stats.total_daily_summaries == 1
        assert stats.oldest_log_date == datetime(2024, 3, 12, 1, 0)
        assert stats.newest_log_date == datetime(2024, 3, 12, 15, 0)
        assert stats.total_storage_size > 0

    @pytest.mark.asyncio
    async def test_export_all_data(self, storage):
        await storage.save_log(make_log(18, 20000))
        data = await storage.export_all_data()

        assert len(data["activity_logs"]) == 1
        assert data["activity_logs"][0]["time_slot_start"] == "2024-03-12T09:00:00"
        assert data["device_id"].startswith("device_")

    @pytest.mark.asyncio
    async def test_cleanup_old_data(self, storage):
        today = date.today()
        await storage.save_log(make_log(18, 100, day=today))
        await storage.save_log(make_log(18, 100, day=today - timedelta(days=120)))
        await storage.save_summary(make_summary((today - timedelta(days=120)).isoformat()))

        removed = await storage.cleanup_old_data(days_to_keep=90)

        assert removed == 2
        assert len(await storage.get_all_logs()) == 1
        assert await storage.get_all_summaries() == []

    @pytest.mark.asyncio
    async def test_clear_all_data_keeps_device_id(self, storage):
        device_id = await storage.get_device_id()
        await storage.save_log(make_log(18, 100))

        await storage.clear_all_data()

        assert await storage.get_all_logs() == []
        assert await storage.get_device_id() == device_id
