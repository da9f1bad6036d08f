"""
Coffee Catalog Backend: Catalog Store Interface
=================================================

What:  Abstract contract between CoffeeService and persistence.
How:   Concrete stores implement every abstract method:
         - SqlAlchemyCatalogStore: relational store over an AsyncSession
         - InMemoryCatalogStore:   dictionary-backed store for tests
Who:   CoffeeService depends only on this module's types.

Contract notes:
    - Reads that return coffees always return them with flavours loaded.
    - construct_* methods build unsaved objects and never touch storage.
    - merge_by_id returns None when the id is absent; it does not raise.
    - unit_of_work() returns a fresh, not yet begun UnitOfWork.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional


class UnitOfWork(ABC):
    """
    Transactional scope for a group of writes.

    Usage pattern (release must run on every exit path):

        uow = store.unit_of_work()
        await uow.begin()
        try:
            await uow.save(a)
            await uow.save(b)
            await uow.commit()
        except Exception:
            await uow.rollback()
            raise
        finally:
            await uow.release()
    """

    @abstractmethod
    async def begin(self) -> None:
        """Open the transaction scope."""
        ...

    @abstractmethod
    async def save(self, entity: Any) -> Any:
        """Stage an insert or update of `entity` inside the open scope."""
        ...

    @abstractmethod
    async def commit(self) -> None:
        """Make every staged write visible atomically."""
        ...

    @abstractmethod
    async def rollback(self) -> None:
        """Discard every staged write. A no-op before begin() or after commit()."""
        ...

    @abstractmethod
    async def release(self) -> None:
        """Free the scope. Safe to call after commit or rollback."""
        ...


class CatalogStore(ABC):
    """Persistence operations for coffees, flavours and events."""

    # ── Coffees ───────────────────────────────────────────────────────────

    @abstractmethod
    async def find_many(self, skip: int, take: int) -> List[Any]:
        """Page of coffees ordered by id, flavours loaded."""
        ...

    @abstractmethod
    async def find_one(self, coffee_id: int) -> Optional[Any]:
        """Coffee with this id, flavours loaded, or None."""
        ...

    @abstractmethod
    async def insert(self, coffee: Any) -> Any:
        """Persist a new coffee together with any unsaved flavours it references."""
        ...

    @abstractmethod
    async def merge_by_id(self, coffee_id: int, fields: Dict[str, Any]) -> Optional[Any]:
        """
        Load the coffee by id and apply `fields` to it without saving.

        Returns None when no coffee has this id.
        """
        ...

    @abstractmethod
    async def save(self, coffee: Any) -> Any:
        """Persist changes made to an existing coffee."""
        ...

    @abstractmethod
    async def delete(self, coffee: Any) -> Any:
        """Delete the coffee and its flavour associations. Returns the coffee."""
        ...

    @abstractmethod
    def construct_coffee(self, **fields: Any) -> Any:
        """Unsaved coffee instance."""
        ...

    # ── Flavours ──────────────────────────────────────────────────────────

    @abstractmethod
    async def find_flavour_by_name(self, name: str) -> Optional[Any]:
        """Flavour whose name equals `name` exactly, or None."""
        ...

    @abstractmethod
    def construct_flavour(self, name: str) -> Any:
        """Unsaved flavour instance."""
        ...

    # ── Events ────────────────────────────────────────────────────────────

    @abstractmethod
    def construct_event(self, name: str, type: str, payload: Dict[str, Any]) -> Any:
        """Unsaved audit event instance."""
        ...

    # ── Transactions ──────────────────────────────────────────────────────

    @abstractmethod
    def unit_of_work(self) -> UnitOfWork:
        ...
