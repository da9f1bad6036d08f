"""
Coffee Catalog Backend: Relational Store Integration Tests
============================================================

What:  CoffeeService over SqlAlchemyCatalogStore on a real SQLite database.
How:   Each test gets a fresh database file (tmp_path) with the schema built
       from Base.metadata, driven through aiosqlite.

What we test:
    ✅ Existing flavours are reused, no duplicate rows
    ✅ PATCH with an empty flavour list empties coffees_flavours
    ✅ Delete removes association rows and keeps flavours
    ✅ A failed recommend persists neither counter nor event, and the
       session stays usable
    ✅ UNIQUE(name) on flavours surfaces as DatabaseError
"""

import pytest
import pytest_asyncio
from sqlalchemy import event, func, select
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from catalog.database import Base
from catalog.exceptions import DatabaseError, NotFoundError, TransactionError
from catalog.models import Coffee, Event, Flavour, coffees_flavours
from catalog.repositories.sqlalchemy_store import SqlAlchemyCatalogStore
from catalog.schemas.coffee import (
    CreateCoffeeRequest,
    PaginationQuery,
    UpdateCoffeeRequest,
)
from catalog.services.coffee_service import CoffeeService


@pytest_asyncio.fixture
async def sqlite_session(tmp_path):
    """AsyncSession on a throwaway SQLite file with every catalog table."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'catalog.db'}")

    # pysqlite's own transaction handling breaks SAVEPOINT; SQLAlchemy emits BEGIN instead
    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, expire_on_commit=False)
    async with session_factory() as session:
        yield session

    await engine.dispose()


@pytest.fixture
def sql_store(sqlite_session):
    return SqlAlchemyCatalogStore(sqlite_session)


@pytest.fixture
def sql_service(sql_store):
    return CoffeeService(sql_store)


async def _count(session, table) -> int:
    return await session.scalar(select(func.count()).select_from(table))


def _request(title, flavours, brand="Buddy Brew"):
    return CreateCoffeeRequest(title=title, brand=brand, flavours=flavours)


class TestRelationalFlavours:

    @pytest.mark.asyncio
    async def test_existing_flavour_is_reused(self, sql_service, sqlite_session):
        first = await sql_service.create(_request("A", ["Vanilla"]))
        second = await sql_service.create(_request("B", ["Vanilla", "Cocoa"]))

        assert await _count(sqlite_session, Flavour) == 2
        assert await _count(sqlite_session, coffees_flavours) == 3
        assert second.flavours[0] is first.flavours[0]

    @pytest.mark.asyncio
    async def test_empty_flavour_list_clears_associations(self, sql_service, sqlite_session):
        coffee = await sql_service.create(_request("A", ["Vanilla", "Cocoa"]))

        updated = await sql_service.update(coffee.id, UpdateCoffeeRequest(flavours=[]))

        assert updated.flavours == []
        assert await _count(sqlite_session, coffees_flavours) == 0
        assert await _count(sqlite_session, Flavour) == 2

    @pytest.mark.asyncio
    async def test_flavours_keep_id_order_after_reload(self, sql_service, sqlite_session):
        await sql_service.create(_request("A", ["Cocoa"]))

        coffee = await sql_service.create(_request("B", ["Vanilla", "Cocoa"]))
        assert [f.name for f in coffee.flavours] == ["Cocoa", "Vanilla"]

        sqlite_session.expunge_all()
        reloaded = await sql_service.find_one(coffee.id)
        assert [f.name for f in reloaded.flavours] == ["Cocoa", "Vanilla"]

    @pytest.mark.asyncio
    async def test_duplicate_flavour_name_raises_database_error(self, sql_store):
        await sql_store.insert(
            sql_store.construct_coffee(
                title="A", brand="X", flavours=[sql_store.construct_flavour("Vanilla")]
            )
        )
        duplicate = sql_store.construct_coffee(
            title="B", brand="X", flavours=[sql_store.construct_flavour("Vanilla")]
        )

        with pytest.raises(DatabaseError) as exc_info:
            await sql_store.insert(duplicate)

        assert exc_info.value.context["error_type"] == "IntegrityError"


class TestRelationalRemove:

    @pytest.mark.asyncio
    async def test_delete_removes_associations_and_keeps_flavours(
        self, sql_service, sqlite_session
    ):
        first = await sql_service.create(_request("A", ["Vanilla"]))
        await sql_service.create(_request("B", ["Vanilla"]))

        await sql_service.remove(first.id)

        assert await _count(sqlite_session, Coffee) == 1
        assert await _count(sqlite_session, coffees_flavours) == 1
        assert await _count(sqlite_session, Flavour) == 1
        with pytest.raises(NotFoundError):
            await sql_service.find_one(first.id)


class TestRelationalQueries:

    @pytest.mark.asyncio
    async def test_find_all_pages_in_id_order(self, sql_service):
        for i in range(4):
            await sql_service.create(_request(f"C{i}", ["Vanilla"] if i else []))

        page = await sql_service.find_all(PaginationQuery(limit=2, offset=1))

        assert [c.title for c in page] == ["C1", "C2"]
        assert [f.name for f in page[0].flavours] == ["Vanilla"]


class TestRelationalRecommend:

    @pytest.mark.asyncio
    async def test_recommend_persists_counter_and_event(self, sql_service, sqlite_session):
        coffee = await sql_service.create(_request("A", ["Vanilla"]))

        await sql_service.recommend(coffee)

        stored = await sqlite_session.scalar(
            select(Coffee.recommendations).where(Coffee.id == coffee.id)
        )
        assert stored == 1
        events = (await sqlite_session.execute(select(Event))).scalars().all()
        assert [(e.name, e.type, e.payload) for e in events] == [
            ("recommend_coffee", "coffee", {"coffeeId": coffee.id})
        ]

    @pytest.mark.asyncio
    async def test_failed_recommend_persists_nothing(
        self, sql_service, sql_store, sqlite_session, monkeypatch
    ):
        coffee = await sql_service.create(_request("A", ["Vanilla"]))
        coffee_id = coffee.id
        await sql_service.recommend(coffee)

        # events.name is NOT NULL: the event flush fails inside the unit of work
        monkeypatch.setattr(
            sql_store,
            "construct_event",
            lambda name, type, payload: Event(name=None, type=type, payload=payload),
        )

        with pytest.raises(TransactionError) as exc_info:
            await sql_service.recommend(coffee)

        assert isinstance(exc_info.value.__cause__, DatabaseError)
        assert coffee.recommendations == 1

        # The request transaction outlives the rolled-back unit of work
        stored = await sqlite_session.scalar(
            select(Coffee.recommendations).where(Coffee.id == coffee_id)
        )
        assert stored == 1
        assert await _count(sqlite_session, Event) == 1
