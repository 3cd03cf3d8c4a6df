"""Tests for the data sources: fixture, live (SQLite), fallback, factory."""
from datetime import date

import pytest
import pytest_asyncio

from common.config import DataSourceConfig
from common.storage import (
    DataStoreError,
    FallbackDataSource,
    FixtureDataSource,
    Range,
    RecordNotFound,
    create_data_source,
)
from common.storage.backend import matches_filters
from common.storage.sql import LiveDataSource, normalize_url


class BrokenSource(FixtureDataSource):
    """Fails every read, like an unreachable database."""

    name = "broken"

    async def list(self, entity, filters=None):
        raise DataStoreError("connection refused")

    async def get(self, entity, record_id):
        raise DataStoreError("connection refused")


@pytest_asyncio.fixture
async def live(tmp_path):
    store = LiveDataSource(f"sqlite+aiosqlite:///{tmp_path / 'backoffice.db'}")
    await store.init()
    yield store
    await store.close()


class TestFilters:

    def test_equality_range_and_membership(self):
        row = {"status": "pending", "date": "2025-04-02", "id": "a-1"}
        assert matches_filters(row, {"status": "pending"})
        assert matches_filters(row, {"date": Range(date(2025, 4, 1), date(2025, 4, 2))})
        assert not matches_filters(row, {"date": Range(start=date(2025, 4, 3))})
        assert matches_filters(row, {"id": ["a-1", "a-2"]})
        assert matches_filters(row, None)


class TestFixtureDataSource:

    @pytest.mark.asyncio
    async def test_list_with_filters(self, source):
        rows = await source.list("approvals", {"status": "pending"})
        assert {r["id"] for r in rows} == {"a-2", "a-3"}

    @pytest.mark.asyncio
    async def test_rows_are_copies(self, source):
        row = await source.get("projects", "p-erp")
        row["worked_hours"] = 0
        assert (await source.get("projects", "p-erp"))["worked_hours"] == 95

    @pytest.mark.asyncio
    async def test_create_assigns_id(self, empty_source):
        row = await empty_source.create("clients", {"company": "Initech"})
        assert row["id"]
        assert (await empty_source.get("clients", row["id"]))["company"] == "Initech"

    @pytest.mark.asyncio
    async def test_update_many_is_all_or_nothing(self, source):
        with pytest.raises(RecordNotFound):
            await source.update_many("approvals", {"a-2": {"status": "approved"}, "a-404": {"status": "approved"}})
        assert (await source.get("approvals", "a-2"))["status"] == "pending"

    @pytest.mark.asyncio
    async def test_delete(self, source):
        await source.delete("tasks", "t-1")
        with pytest.raises(RecordNotFound):
            await source.get("tasks", "t-1")

    @pytest.mark.asyncio
    async def test_unknown_entity(self, source):
        with pytest.raises(ValueError):
            await source.list("invoices")

    def test_missing_yaml(self, tmp_path):
        with pytest.raises(DataStoreError):
            FixtureDataSource.from_yaml(str(tmp_path / "nope.yaml"))


class TestLiveDataSource:

    def test_normalize_url(self):
        assert normalize_url("postgres://u:p@h/db") == "postgresql+asyncpg://u:p@h/db"
        assert normalize_url("sqlite+aiosqlite:///x.db") == "sqlite+aiosqlite:///x.db"

    @pytest.mark.asyncio
    async def test_create_get_update_delete(self, live):
        channel = await live.create("channels", {"name": "Direct", "type": "direct", "hourly_rate": 150})
        client = await live.create("clients", {"company": "ACME"})
        project = await live.create("projects", {
            "channel_id": channel["id"],
            "client_id": client["id"],
            "product": "ERP",
            "start_date": "2025-01-06",
            "unknown_column": "ignored",
        })
        assert project["start_date"] == date(2025, 1, 6)
        assert "unknown_column" not in project

        updated = await live.update("projects", project["id"], {"worked_hours": 12})
        assert updated["worked_hours"] == 12

        await live.delete("projects", project["id"])
        with pytest.raises(RecordNotFound):
            await live.get("projects", project["id"])

    @pytest.mark.asyncio
    async def test_list_filters(self, live):
        demand = await live.create("demands", {"title": "Reports", "assigned_to": "c-1"})
        for day, hours in (("2025-04-01", 4), ("2025-04-02", 2), ("2025-04-10", 1)):
            await live.create("time_entries", {
                "demand_id": demand["id"], "consultant_id": "c-1", "hours": hours, "date": day,
            })
        rows = await live.list("time_entries", {"date": Range(date(2025, 4, 1), date(2025, 4, 2))})
        assert sorted(r["hours"] for r in rows) == [2, 4]
        assert await live.list("time_entries", {"consultant_id": "c-2"}) == []

    @pytest.mark.asyncio
    async def test_update_many_missing_id_changes_nothing(self, live):
        row = await live.create("approvals", {
            "time_entry_id": "te-1", "consultant_id": "c-1", "hours": 2, "status": "pending",
        })
        with pytest.raises(RecordNotFound):
            await live.update_many("approvals", {row["id"]: {"status": "approved"}, "missing": {"status": "approved"}})
        assert (await live.get("approvals", row["id"]))["status"] == "pending"

    @pytest.mark.asyncio
    async def test_json_columns(self, live):
        row = await live.create("payments", {
            "consultant_id": "c-1", "entry_ids": ["a-1", "a-2"], "total_hours": 6, "total_amount": 360,
        })
        assert (await live.get("payments", row["id"]))["entry_ids"] == ["a-1", "a-2"]

    @pytest.mark.asyncio
    async def test_health(self, live):
        assert await live.health() == {"backend": "live", "ok": True}


class TestFallbackDataSource:

    @pytest.mark.asyncio
    async def test_reads_fall_back(self, source):
        store = FallbackDataSource(BrokenSource(), source)
        rows = await store.list("projects")
        assert len(rows) == 3
        assert (await store.get("projects", "p-erp"))["id"] == "p-erp"

    @pytest.mark.asyncio
    async def test_not_found_does_not_fall_back(self, source, empty_source):
        store = FallbackDataSource(empty_source, source)
        with pytest.raises(RecordNotFound):
            await store.get("projects", "p-erp")

    @pytest.mark.asyncio
    async def test_writes_never_fall_back(self, source, empty_source):
        store = FallbackDataSource(empty_source, source)
        await store.create("clients", {"company": "Initech"})
        assert len(await empty_source.list("clients")) == 1
        assert len(await source.list("clients")) == 2


class TestFactory:

    def test_fixture_backend(self):
        assert isinstance(create_data_source(DataSourceConfig(backend="fixture")), FixtureDataSource)

    def test_live_backend(self, tmp_path):
        config = DataSourceConfig(backend="live", database_url=f"sqlite+aiosqlite:///{tmp_path / 'x.db'}")
        assert isinstance(create_data_source(config), LiveDataSource)

    def test_auto_wraps_live_with_fixture(self, tmp_path):
        config = DataSourceConfig(backend="auto", database_url=f"sqlite+aiosqlite:///{tmp_path / 'x.db'}")
        store = create_data_source(config)
        assert isinstance(store, FallbackDataSource)
        assert isinstance(store.primary, LiveDataSource)
        assert isinstance(store.fallback, FixtureDataSource)

    def test_auto_without_fallback(self, tmp_path):
        config = DataSourceConfig(
            backend="auto",
            database_url=f"sqlite+aiosqlite:///{tmp_path / 'x.db'}",
            fallback_to_fixture=False,
        )
        assert isinstance(create_data_source(config), LiveDataSource)
