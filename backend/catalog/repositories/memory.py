"""
Coffee Catalog Backend: In-Memory Catalog Store
=================================================

What:  Dictionary-backed CatalogStore with the same observable contract as
       SqlAlchemyCatalogStore.
Who:   The test suite (service tests directly, API tests through
       FastAPI dependency_overrides).

Behaviour mirrored from the relational store:
    - Surrogate integer ids assigned on insert, starting at 1.
    - Returned objects are shared references (like a session identity map).
    - Flavour names are unique: inserting a second unsaved flavour with an
      existing name raises DatabaseError, as the UNIQUE constraint would.
    - A saved coffee lists its flavours in id order.
    - Unit-of-work writes are staged and become visible only on commit.
"""

import itertools
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from catalog.exceptions import DatabaseError, TransactionError
from catalog.repositories.base import CatalogStore, UnitOfWork


@dataclass(eq=False)
class FlavourRecord:
    name: str
    id: Optional[int] = None
    coffees: List["CoffeeRecord"] = field(default_factory=list, repr=False)


@dataclass(eq=False)
class CoffeeRecord:
    title: str
    brand: str
    description: str = ""
    recommendations: int = 0
    flavours: List[FlavourRecord] = field(default_factory=list)
    id: Optional[int] = None


@dataclass(eq=False)
class EventRecord:
    name: str
    type: str
    payload: Dict[str, Any] = field(default_factory=dict)
    id: Optional[int] = None


class InMemoryUnitOfWork(UnitOfWork):
    """Stages saves in a list; commit applies them to the store."""

    def __init__(self, store: "InMemoryCatalogStore"):
        self._store = store
        self._staged: Optional[List[Any]] = None

    async def begin(self) -> None:
        self._staged = []

    async def save(self, entity: Any) -> Any:
        if self._staged is None:
            raise TransactionError(message="Unit of work used before begin()")
        self._staged.append(entity)
        return entity

    async def commit(self) -> None:
        if self._staged is None:
            raise TransactionError(message="Unit of work used before begin()")
        for entity in self._staged:
            if isinstance(entity, EventRecord):
                self._store.append_event(entity)
            else:
                await self._store.save(entity)
        self._staged = None

    async def rollback(self) -> None:
        self._staged = None

    async def release(self) -> None:
        self._staged = None


class InMemoryCatalogStore(CatalogStore):
    """Catalog store keeping everything in process memory."""

    def __init__(self):
        self.coffees: Dict[int, CoffeeRecord] = {}
        self.flavours: Dict[int, FlavourRecord] = {}
        self.events: List[EventRecord] = []
        self._coffee_ids = itertools.count(1)
        self._flavour_ids = itertools.count(1)
        self._event_ids = itertools.count(1)

    # ── Coffees ───────────────────────────────────────────────────────────

    async def find_many(self, skip: int, take: int) -> List[CoffeeRecord]:
        ordered = [self.coffees[key] for key in sorted(self.coffees)]
        return ordered[skip:skip + take]

    async def find_one(self, coffee_id: int) -> Optional[CoffeeRecord]:
        return self.coffees.get(coffee_id)

    async def insert(self, coffee: CoffeeRecord) -> CoffeeRecord:
        self._persist_flavours(coffee)
        coffee.id = next(self._coffee_ids)
        self.coffees[coffee.id] = coffee
        return coffee

    async def merge_by_id(self, coffee_id: int, fields: Dict[str, Any]) -> Optional[CoffeeRecord]:
        coffee = self.coffees.get(coffee_id)
        if coffee is None:
            return None
        for key, value in fields.items():
            setattr(coffee, key, value)
        return coffee

    async def save(self, coffee: CoffeeRecord) -> CoffeeRecord:
        if coffee.id is None:
            return await self.insert(coffee)
        self._persist_flavours(coffee)
        self.coffees[coffee.id] = coffee
        return coffee

    async def delete(self, coffee: CoffeeRecord) -> CoffeeRecord:
        self.coffees.pop(coffee.id, None)
        for flavour in coffee.flavours:
            if coffee in flavour.coffees:
                flavour.coffees.remove(coffee)
        return coffee

    def construct_coffee(self, **fields: Any) -> CoffeeRecord:
        return CoffeeRecord(**fields)

    # ── Flavours ──────────────────────────────────────────────────────────

    async def find_flavour_by_name(self, name: str) -> Optional[FlavourRecord]:
        for flavour in self.flavours.values():
            if flavour.name == name:
                return flavour
        return None

    def construct_flavour(self, name: str) -> FlavourRecord:
        return FlavourRecord(name=name)

    def _persist_flavours(self, coffee: CoffeeRecord) -> None:
        for flavour in coffee.flavours:
            if flavour.id is None:
                if any(f.name == flavour.name for f in self.flavours.values()):
                    raise DatabaseError(
                        context={"operation": "insert", "constraint": "flavours_name_key"},
                    )
                flavour.id = next(self._flavour_ids)
                self.flavours[flavour.id] = flavour
            if coffee not in flavour.coffees:
                flavour.coffees.append(coffee)
        coffee.flavours.sort(key=lambda f: f.id)
        # Drop back-references to flavours the coffee no longer carries
        for flavour in self.flavours.values():
            if flavour not in coffee.flavours and coffee in flavour.coffees:
                flavour.coffees.remove(coffee)

    # ── Events ────────────────────────────────────────────────────────────

    def construct_event(self, name: str, type: str, payload: Dict[str, Any]) -> EventRecord:
        return EventRecord(name=name, type=type, payload=dict(payload))

    def append_event(self, event: EventRecord) -> EventRecord:
        event.id = next(self._event_ids)
        self.events.append(event)
        return event

    # ── Transactions ──────────────────────────────────────────────────────

    def unit_of_work(self) -> InMemoryUnitOfWork:
        return InMemoryUnitOfWork(self)
