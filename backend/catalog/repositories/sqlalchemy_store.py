"""
Coffee Catalog Backend: SQLAlchemy Catalog Store
==================================================

What:  CatalogStore implementation over a request-scoped AsyncSession.
How:   Writes are flushed, not committed; get_db_session commits once the
       request handler returns. The unit of work is a SAVEPOINT
       (`begin_nested`) on the same session, so a failed unit rolls back
       its own writes while the surrounding request transaction survives.
Who:   Built per request by catalog.dependencies.get_catalog_store.

Query plans:
    find_many:  SELECT coffees ORDER BY id LIMIT :take OFFSET :skip
                + SELECT flavours ... WHERE coffee_id IN (...)   (selectinload)
    find_one:   SELECT coffees WHERE id = :id + selectinload of flavours

Flavours are listed in id order, both after a write and on every load.
"""

import functools
import logging
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, AsyncSessionTransaction
from sqlalchemy.orm import selectinload

from catalog.exceptions import DatabaseError, TransactionError
from catalog.models.coffee import Coffee, Flavour
from catalog.models.event import Event
from catalog.repositories.base import CatalogStore, UnitOfWork

logger = logging.getLogger(__name__)


def translate_db_errors(operation: str) -> Callable:
    """Re-raise SQLAlchemy failures from the decorated coroutine as DatabaseError."""

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            try:
                return await func(*args, **kwargs)
            except SQLAlchemyError as e:
                logger.error("Database error during %s: %s", operation, str(e), exc_info=True)
                raise DatabaseError(
                    context={"operation": operation, "error_type": type(e).__name__},
                ) from e

        return wrapper

    return decorator


def _order_flavours(coffee: Coffee) -> None:
    # Flush assigned the ids; match the order_by a later load applies
    coffee.flavours.sort(key=lambda flavour: flavour.id)


class SqlAlchemyUnitOfWork(UnitOfWork):
    """SAVEPOINT-backed unit of work on an existing session."""

    def __init__(self, session: AsyncSession):
        self._session = session
        self._transaction: Optional[AsyncSessionTransaction] = None

    def _require_open(self) -> AsyncSessionTransaction:
        if self._transaction is None:
            raise TransactionError(message="Unit of work used before begin()")
        return self._transaction

    async def begin(self) -> None:
        self._transaction = await self._session.begin_nested()

    @translate_db_errors("unit_of_work.save")
    async def save(self, entity: Any) -> Any:
        self._require_open()
        self._session.add(entity)
        await self._session.flush()
        return entity

    async def commit(self) -> None:
        await self._require_open().commit()
        self._transaction = None

    async def rollback(self) -> None:
        # A failed flush deactivates the SAVEPOINT without rolling it back;
        # until rollback() runs the session refuses every further statement
        if self._transaction is not None:
            await self._transaction.rollback()

    async def release(self) -> None:
        self._transaction = None


class SqlAlchemyCatalogStore(CatalogStore):
    """
    Relational catalog store.

    Args:
        session: The request's AsyncSession (see get_db_session).
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    @staticmethod
    def _coffee_query():
        return select(Coffee).options(selectinload(Coffee.flavours))

    # ── Coffees ───────────────────────────────────────────────────────────

    @translate_db_errors("find_many")
    async def find_many(self, skip: int, take: int) -> List[Coffee]:
        result = await self.session.execute(
            self._coffee_query().order_by(Coffee.id).offset(skip).limit(take)
        )
        return list(result.scalars().all())

    @translate_db_errors("find_one")
    async def find_one(self, coffee_id: int) -> Optional[Coffee]:
        result = await self.session.execute(
            self._coffee_query().where(Coffee.id == coffee_id)
        )
        return result.scalar_one_or_none()

    @translate_db_errors("insert")
    async def insert(self, coffee: Coffee) -> Coffee:
        # Pending flavours cascade in through the relationship
        self.session.add(coffee)
        await self.session.flush()
        _order_flavours(coffee)
        return coffee

    async def merge_by_id(self, coffee_id: int, fields: Dict[str, Any]) -> Optional[Coffee]:
        coffee = await self.find_one(coffee_id)
        if coffee is None:
            return None
        for key, value in fields.items():
            setattr(coffee, key, value)
        return coffee

    @translate_db_errors("save")
    async def save(self, coffee: Coffee) -> Coffee:
        self.session.add(coffee)
        await self.session.flush()
        _order_flavours(coffee)
        return coffee

    @translate_db_errors("delete")
    async def delete(self, coffee: Coffee) -> Coffee:
        await self.session.delete(coffee)
        await self.session.flush()
        return coffee

    def construct_coffee(self, **fields: Any) -> Coffee:
        return Coffee(**fields)

    # ── Flavours ──────────────────────────────────────────────────────────

    @translate_db_errors("find_flavour_by_name")
    async def find_flavour_by_name(self, name: str) -> Optional[Flavour]:
        result = await self.session.execute(
            select(Flavour).where(Flavour.name == name)
        )
        return result.scalar_one_or_none()

    def construct_flavour(self, name: str) -> Flavour:
        return Flavour(name=name)

    # ── Events ────────────────────────────────────────────────────────────

    def construct_event(self, name: str, type: str, payload: Dict[str, Any]) -> Event:
        return Event(name=name, type=type, payload=payload)

    # ── Transactions ──────────────────────────────────────────────────────

    def unit_of_work(self) -> SqlAlchemyUnitOfWork:
        return SqlAlchemyUnitOfWork(self.session)
