"""
Coffee Catalog Backend: FastAPI Dependencies
==============================================

What:  Providers wiring the object graph per request, plus the API-key guard.

    get_db_session ──▶ get_catalog_store ──▶ get_coffee_service ──▶ route

Tests swap the store with `app.dependency_overrides[get_catalog_store]`.
"""

import logging
import secrets
from typing import Optional

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.config import settings
from catalog.database import get_db_session
from catalog.exceptions import ForbiddenError
from catalog.repositories.base import CatalogStore
from catalog.repositories.sqlalchemy_store import SqlAlchemyCatalogStore
from catalog.services.coffee_service import CoffeeService

logger = logging.getLogger(__name__)


def get_catalog_store(db: AsyncSession = Depends(get_db_session)) -> CatalogStore:
    return SqlAlchemyCatalogStore(db)


def get_coffee_service(store: CatalogStore = Depends(get_catalog_store)) -> CoffeeService:
    return CoffeeService(store)


async def require_api_key(
    authorization: Optional[str] = Header(
        default=None,
        description="API key guarding mutating routes",
    ),
) -> None:
    """
    Reject the request unless the Authorization header equals API_KEY.

    Routes without this dependency are public.

    Raises:
        ForbiddenError: header missing or wrong (→ 403).
    """
    if authorization is None or not secrets.compare_digest(
        authorization.encode(), settings.api_key.encode()
    ):
        logger.warning("Rejected request with %s API key", "missing" if authorization is None else "invalid")
        raise ForbiddenError()
