"""Tests for the Supabase remote store."""

import json
from datetime import datetime
import httpx
import pytest
from backend.models.activity import StoredDailySummary
from backend.services import RemoteStoreError, SupabaseRemoteStore
from tests.conftest import make_log


def make_store(handler) -> SupabaseRemoteStore:
    return SupabaseRemoteStore(
        "https://example.supabase.co/",
        "anon-key",
        transport=httpx.MockTransport(handler),
    )


class TestUpsert:
    @pytest.mark.asyncio
    async def test_upsert_log_posts_snake_case_row(self):
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(201)

        store = make_store(handler)
        await store.upsert_log(make_log(18, 20000, name="Client work"))
        await store.close()

        request = requests[0]
        assert request.method == "POST"
        assert request.url.path == "/rest/v1/activity_logs"
        assert request.headers["apikey"] == "anon-key"
        assert request.headers["Authorization"] == "Bearer anon-key"
        assert "resolution=merge-duplicates" in request.headers["Prefer"]

        row = json.loads(request.content)
        assert row["id"] == "slot_2024-03-12_18"
        assert row["activity_id"] == "20000_0"
        assert row["activity_name"] == "Client work"
        assert row["block_value"] == 10000
        assert row["device_id"] == "device_test"
        assert datetime.fromisoformat(row["time_slot_start"]).utcoffset() is not None

    @pytest.mark.asyncio
    async def test_upsert_summary_targets_summary_table(self):
        paths = []

        def handler(request: httpx.Request) -> httpx.Response:
            paths.append(request.url.path)
            return httpx.Response(201)

        store = make_store(handler)
        await store.upsert_summary(
            StoredDailySummary(
                id="summary_2024-03-12_device_test",
                date="2024-03-12",
                total_value=7500,
                activity_count=2,
                computed_at=datetime(2024, 3, 12, 23, 0),
                device_id="device_test",
            )
        )
        await store.close()

        assert paths == ["/rest/v1/daily_summaries"]

    @pytest.mark.asyncio
    async def test_rejected_upsert_raises(self):
        store = make_store(lambda request: httpx.Response(409, text="conflict"))

        with pytest.raises(RemoteStoreError, match="409"):
            await store.upsert_log(make_log(18, 20000))
        await store.close()

    @pytest.mark.asyncio
    async def test_network_error_raises(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        store = make_store(handler)
        with pytest.raises(RemoteStoreError):
            await store.upsert_log(make_log(18, 20000))
        await store.close()


class TestFetch:
    @pytest.mark.asyncio
    async def test_fetch_filters_by_device_and_round_trips(self):
        original = make_log(18, 20000, name="Client work")
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["params"] = dict(request.url.params)
            return httpx.Response(200, json=[SupabaseRemoteStore.log_to_row(original)])

        store = make_store(handler)
        logs = await store.fetch_logs_for_device("device_test")
        await store.close()

        assert seen["params"]["device_id"] == "eq.device_test"
        assert seen["params"]["select"] == "*"
        assert len(logs) == 1
        assert logs[0].time_slot_start == original.time_slot_start
        assert logs[0].time_slot_end == original.time_slot_end
        assert logs[0].block_value == original.block_value

    @pytest.mark.asyncio
    async def test_malformed_rows_are_skipped(self):
        good = SupabaseRemoteStore.log_to_row(make_log(18, 20000))
        bad = {"id": "broken", "activity_name": "No times"}
        store = make_store(lambda request: httpx.Response(200, json=[bad, good]))

        logs = await store.fetch_logs_for_device("device_test")
        await store.close()

        assert [log.id for log in logs] == ["slot_2024-03-12_18"]

    @pytest.mark.asyncio
    async def test_missing_activity_id_defaults_to_empty(self):
        row = SupabaseRemoteStore.log_to_row(make_log(18, 20000))
        row.pop("activity_id")
        store = make_store(lambda request: httpx.Response(200, json=[row]))

        logs = await store.fetch_logs_for_device("device_test")
        await store.close()

        assert logs[0].activity_id == ""

    @pytest.mark.asyncio
    async def test_server_error_raises(self):
        store = make_store(lambda request: httpx.Response(500))
        with pytest.raises(RemoteStoreError):
            await store.fetch_logs_for_device("device_test")
        await store.close()
