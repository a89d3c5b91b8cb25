"""
Tests for the database lifecycle: schema, cascade and reset.

The engine is bound to the event loop that created its connections, so
every ``run`` disposes it before the loop closes.
"""

import asyncio

import pytest
from sqlalchemy import func, select

from h2subsidy_api import progress, vendors
from h2subsidy_api.database import SubsidyDatabase
from h2subsidy_api.errors import SchemaError, StoreError
from h2subsidy_api.schema import progress_logs, users
from h2subsidy_api.schema import vendors as vendors_table


def run(db: SubsidyDatabase, coro):
    async def scoped():
        try:
            return await coro
        finally:
            await db.close()

    return asyncio.run(scoped())


async def count_rows(db: SubsidyDatabase, table) -> int:
    async with db.engine.connect() as conn:
        return (await conn.execute(select(func.count()).select_from(table))).scalar_one()


@pytest.fixture
def db(tmp_path):
    database = SubsidyDatabase(f"sqlite:///{tmp_path / 'lifecycle.db'}")
    run(database, database.ensure_schema())
    return database


class TestSchema:
    """Tests for ensure_schema."""

    def test_ensure_schema_is_idempotent(self, db):
        run(db, db.ensure_schema())
        run(db, db.ensure_schema())
        assert run(db, count_rows(db, vendors_table)) == 0

    def test_unreachable_store_raises(self, tmp_path):
        database = SubsidyDatabase(f"sqlite:///{tmp_path / 'missing' / 'dir' / 'x.db'}")
        with pytest.raises(SchemaError):
            run(database, database.ensure_schema())

    def test_url_normalized_to_async_driver(self, db):
        assert db.database_url.startswith("sqlite+aiosqlite://")
        assert db.backend == "sqlite"

    def test_pool_bounded_for_sqlite_file(self, tmp_path):
        database = SubsidyDatabase(f"sqlite:///{tmp_path / 'pool.db'}", pool_size=3)
        assert database.in_memory is False
        assert database.engine.sync_engine.pool.size() == 3
        run(database, database.ping())

    def test_in_memory_sqlite_detected(self):
        assert SubsidyDatabase("sqlite:///:memory:").in_memory is True
        assert SubsidyDatabase("sqlite://").in_memory is True

    def test_ping(self, db):
        assert run(db, db.ping()) is True


class TestCascadeAndReset:
    """Tests for ownership of progress rows and the reset utility."""

    def test_deleting_vendor_cascades_to_progress(self, db):
        async def scenario():
            vendor_id = await vendors.add_vendor(db, "Acme H2", "0x01", 1000, 5)
            await progress.record_progress(db, vendor_id, 10)
            await progress.record_progress(db, vendor_id, 20)
            assert await count_rows(db, progress_logs) == 2

            async with db.engine.begin() as conn:
                await conn.execute(vendors_table.delete().where(vendors_table.c.id == vendor_id))
            return await count_rows(db, progress_logs)

        assert run(db, scenario()) == 0

    def test_total_progress_matches_entries(self, db):
        async def scenario():
            vendor_id = await vendors.add_vendor(db, "Acme H2", "0x01", 1000, 5)
            for value in (450, 300):
                await progress.record_progress(db, vendor_id, value)
            return await progress.get_total_progress(db, vendor_id)

        assert run(db, scenario()) == 750

    def test_reset_clears_all_tables(self, db):
        async def scenario():
            async with db.engine.begin() as conn:
                await conn.execute(
                    users.insert().values(
                        name="Ada", email="ada@example.com", password_hash="x", role="auditor"
                    )
                )
            vendor_id = await vendors.add_vendor(db, "Acme H2", "0x01", 1000, 5)
            await progress.record_progress(db, vendor_id, 10)

            await db.reset_all()
            return [await count_rows(db, table) for table in (users, vendors_table, progress_logs)]

        assert run(db, scenario()) == [0, 0, 0]

    def test_reset_on_empty_database(self, db):
        run(db, db.reset_all())
        assert run(db, count_rows(db, users)) == 0

    def test_reset_without_schema_is_store_error(self, tmp_path):
        database = SubsidyDatabase(f"sqlite:///{tmp_path / 'empty.db'}")
        with pytest.raises(StoreError) as exc_info:
            run(database, database.reset_all())
        assert exc_info.value.message == "Failed to reset."
