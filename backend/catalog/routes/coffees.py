"""
Coffee Catalog Backend: Coffees Route Handlers
================================================

What:  HTTP surface of CoffeeService.

    GET    /coffees                    list (public)
    GET    /coffees/{id}               detail (public)
    POST   /coffees                    create (API key)
    PATCH  /coffees/{id}               partial update (API key)
    DELETE /coffees/{id}               delete (API key)
    POST   /coffees/{id}/recommend     recommend (API key)

Handlers stay thin: parse input, call the service, let the global exception
handlers turn NotFoundError / TransactionError into responses.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, Query, Response

from catalog.config import settings
from catalog.dependencies import get_coffee_service, require_api_key
from catalog.schemas.coffee import (
    CoffeeResponse,
    CreateCoffeeRequest,
    PaginationQuery,
    UpdateCoffeeRequest,
)
from catalog.schemas.common import ErrorResponse
from catalog.services.coffee_service import CoffeeService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/coffees", tags=["Coffees"])

_NOT_FOUND = {404: {"description": "Coffee not found", "model": ErrorResponse}}
_FORBIDDEN = {403: {"description": "Missing or invalid API key", "model": ErrorResponse}}


@router.get(
    "",
    response_model=List[CoffeeResponse],
    summary="List coffees",
    description="Offset-paginated list of coffees with their flavours, ordered by id.",
)
async def list_coffees(
    response: Response,
    limit: int = Query(
        default=settings.default_page_limit,
        ge=1,
        le=settings.max_page_limit,
        description="Maximum number of coffees to return",
    ),
    offset: int = Query(default=0, ge=0, description="Number of coffees to skip"),
    service: CoffeeService = Depends(get_coffee_service),
):
    coffees = await service.find_all(PaginationQuery(limit=limit, offset=offset))
    response.headers["X-Page-Size"] = str(len(coffees))
    return coffees


@router.get(
    "/{coffee_id}",
    response_model=CoffeeResponse,
    responses=_NOT_FOUND,
    summary="Get a coffee by id",
)
async def get_coffee(
    coffee_id: str,
    service: CoffeeService = Depends(get_coffee_service),
):
    return await service.find_one(coffee_id)


@router.post(
    "",
    status_code=201,
    response_model=CoffeeResponse,
    responses={**_FORBIDDEN, 400: {"description": "Invalid body", "model": ErrorResponse}},
    dependencies=[Depends(require_api_key)],
    summary="Create a coffee",
    description=(
        "Creates a coffee. Flavour names that already exist are reused; "
        "unknown names create new flavours."
    ),
)
async def create_coffee(
    body: CreateCoffeeRequest,
    service: CoffeeService = Depends(get_coffee_service),
):
    return await service.create(body)


@router.patch(
    "/{coffee_id}",
    response_model=CoffeeResponse,
    responses={**_NOT_FOUND, **_FORBIDDEN},
    dependencies=[Depends(require_api_key)],
    summary="Update a coffee",
    description=(
        "Applies only the fields present in the body. A `flavours` list, "
        "even an empty one, replaces the coffee's whole flavour set."
    ),
)
async def update_coffee(
    coffee_id: str,
    body: UpdateCoffeeRequest,
    service: CoffeeService = Depends(get_coffee_service),
):
    return await service.update(coffee_id, body)


@router.delete(
    "/{coffee_id}",
    response_model=CoffeeResponse,
    responses={**_NOT_FOUND, **_FORBIDDEN},
    dependencies=[Depends(require_api_key)],
    summary="Delete a coffee",
    description="Deletes the coffee and returns its last state. Flavours are kept.",
)
async def delete_coffee(
    coffee_id: str,
    service: CoffeeService = Depends(get_coffee_service),
):
    return await service.remove(coffee_id)


@router.post(
    "/{coffee_id}/recommend",
    response_model=CoffeeResponse,
    responses={
        **_NOT_FOUND,
        **_FORBIDDEN,
        500: {"description": "Recommendation rolled back", "model": ErrorResponse},
    },
    dependencies=[Depends(require_api_key)],
    summary="Recommend a coffee",
    description="Increments the recommendation counter and records a recommend_coffee event.",
)
async def recommend_coffee(
    coffee_id: str,
    service: CoffeeService = Depends(get_coffee_service),
):
    coffee = await service.find_one(coffee_id)
    return await service.recommend(coffee)
