"""
Coffee Catalog Backend: Coffee Service (Business Logic)
========================================================

What:  CRUD for the Coffee aggregate, flavour reconciliation, and the
       transactional recommend operation.
How:   All persistence goes through the injected CatalogStore, so the same
       code runs against the relational store and the in-memory store.
Who:   Route handlers (via catalog.dependencies.get_coffee_service).

Flavour reconciliation (create / update):
    ["Vanilla", "Cocoa", "Vanilla"]
        │  de-duplicate, keep first-seen order
        ▼
    ["Vanilla", "Cocoa"]
        │  per name: find_flavour_by_name → existing row, or construct_flavour
        ▼
    [Flavour(id=3, "Vanilla"), Flavour(id=None, "Cocoa")]
        │  saved with the coffee; unsaved flavours are inserted alongside
        ▼
    coffee.flavours

Recommend:
    begin → recommendations += 1 → save coffee → save Event → commit
    any failure: rollback, restore the counter, raise TransactionError
    release always runs
"""

import logging
from typing import Any, List, Union

from catalog.exceptions import NotFoundError, TransactionError
from catalog.repositories.base import CatalogStore
from catalog.schemas.coffee import (
    CreateCoffeeRequest,
    PaginationQuery,
    UpdateCoffeeRequest,
)

logger = logging.getLogger(__name__)

RECOMMEND_EVENT_NAME = "recommend_coffee"
RECOMMEND_EVENT_TYPE = "coffee"


class CoffeeService:
    """
    Business logic for the coffees resource.

    Args:
        store: CatalogStore the service reads from and writes to.

    Error Handling:
        Missing coffees raise NotFoundError("Coffee <id> not found").
        recommend() wraps any failure in TransactionError after rolling back.
        Store failures (DatabaseError) propagate unchanged.
    """

    def __init__(self, store: CatalogStore):
        self.store = store

    @staticmethod
    def _parse_id(coffee_id: Union[int, str]) -> int:
        """Integer key for `coffee_id`; unparsable ids cannot exist."""
        try:
            return int(str(coffee_id).strip())
        except ValueError:
            raise NotFoundError(resource="Coffee", resource_id=coffee_id)

    async def find_all(self, pagination: PaginationQuery) -> List[Any]:
        """
        Page of coffees with their flavours.

        Args:
            pagination: offset (rows to skip) and limit (max rows).

        Returns:
            Possibly empty list, ordered by id.
        """
        return await self.store.find_many(skip=pagination.offset, take=pagination.limit)

    async def find_one(self, coffee_id: Union[int, str]) -> Any:
        """
        Single coffee by id.

        Raises:
            NotFoundError: no coffee with this id.
        """
        coffee = await self.store.find_one(self._parse_id(coffee_id))
        if coffee is None:
            raise NotFoundError(resource="Coffee", resource_id=coffee_id)
        return coffee

    async def create(self, data: CreateCoffeeRequest) -> Any:
        """
        Create a coffee, reusing existing flavours by exact name.

        Returns:
            The persisted coffee with its generated id and resolved flavours.
        """
        flavours = await self._preload_flavours(data.flavours)
        coffee = self.store.construct_coffee(
            title=data.title,
            brand=data.brand,
            description="",
            recommendations=0,
            flavours=flavours,
        )
        coffee = await self.store.insert(coffee)
        logger.info(
            "Coffee %s created (%d flavour(s): %s)",
            coffee.id,
            len(flavours),
            ", ".join(f.name for f in flavours),
        )
        return coffee

    async def update(self, coffee_id: Union[int, str], data: UpdateCoffeeRequest) -> Any:
        """
        Apply the fields present in `data` to the coffee.

        A present `flavours` list (empty included) replaces the whole flavour
        set. The existence check is the store's merge result, not a separate
        probe.

        Raises:
            NotFoundError: no coffee with this id.
        """
        key = self._parse_id(coffee_id)
        fields = data.model_dump(exclude_unset=True)
        if "flavours" in fields:
            fields["flavours"] = await self._preload_flavours(fields["flavours"])

        coffee = await self.store.merge_by_id(key, fields)
        if coffee is None:
            raise NotFoundError(resource="Coffee", resource_id=coffee_id)

        coffee = await self.store.save(coffee)
        logger.info("Coffee %s updated (fields: %s)", key, ", ".join(sorted(fields)) or "none")
        return coffee

    async def remove(self, coffee_id: Union[int, str]) -> Any:
        """
        Delete the coffee. Its flavours stay, they may belong to other coffees.

        Returns:
            The deleted coffee as it was last loaded.

        Raises:
            NotFoundError: no coffee with this id.
        """
        coffee = await self.find_one(coffee_id)
        deleted = await self.store.delete(coffee)
        logger.info("Coffee %s removed", coffee_id)
        return deleted

    async def recommend(self, coffee: Any) -> Any:
        """
        Increment the recommendation counter and record an audit event atomically.

        Args:
            coffee: A coffee already loaded by the caller (e.g. via find_one).

        Returns:
            The same coffee, counter incremented.

        Raises:
            TransactionError: any step failed; nothing was persisted and
                `coffee.recommendations` holds its previous value.
        """
        # Read before the unit of work: a rolled-back SAVEPOINT expires the object
        coffee_id = coffee.id
        original = coffee.recommendations

        uow = self.store.unit_of_work()
        try:
            await uow.begin()
            coffee.recommendations = original + 1
            await uow.save(coffee)
            event = self.store.construct_event(
                name=RECOMMEND_EVENT_NAME,
                type=RECOMMEND_EVENT_TYPE,
                payload={"coffeeId": coffee_id},
            )
            await uow.save(event)
            await uow.commit()
        except Exception as e:
            await uow.rollback()
            coffee.recommendations = original
            logger.error(
                "Recommend for coffee %s rolled back: %s: %s",
                coffee_id,
                type(e).__name__,
                str(e),
            )
            raise TransactionError(
                message=f"Could not recommend coffee {coffee_id}. No changes were saved.",
                context={"coffee_id": coffee_id, "error_type": type(e).__name__},
            ) from e
        finally:
            await uow.release()

        logger.info("Coffee %s recommended (total %d)", coffee_id, original + 1)
        return coffee

    async def _preload_flavours(self, names: List[str]) -> List[Any]:
        """Resolve names to existing flavours or new unsaved ones, in first-seen order."""
        flavours = []
        # Sequential: one AsyncSession must not run concurrent queries
        for name in dict.fromkeys(names):
            existing = await self.store.find_flavour_by_name(name)
            flavours.append(existing if existing is not None else self.store.construct_flavour(name))
        return flavours
