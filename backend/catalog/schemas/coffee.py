"""
Coffee Catalog Backend: Coffee Request/Response Schemas
=========================================================

What:  Pydantic models forming the API contract for the coffees resource.
How:   FastAPI validates request bodies and query strings against these
       models before any service code runs, and serializes ORM objects
       through the response models (from_attributes).

Request models forbid unknown fields: a body carrying a property that is not
declared here is rejected with a 400 validation_error.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from catalog.config import settings


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class CreateCoffeeRequest(BaseModel):
    """Body of POST /coffees. All fields required; `flavours` may be empty."""

    model_config = ConfigDict(extra="forbid")

    title: str = Field(description="The name of a coffee.")
    brand: str = Field(description="The brand of a coffee.")
    flavours: List[str] = Field(
        description="Flavour names; existing flavours are reused by exact name.",
        examples=[["Vanilla", "Espresso", "Black"]],
    )


class UpdateCoffeeRequest(BaseModel):
    """
    Body of PATCH /coffees/{id}. Every field is optional.

    Only fields present in the body are applied (see `model_dump(exclude_unset=True)`
    in the service), so `{"flavours": []}` clears the flavour set while `{}`
    leaves it alone. Explicit nulls are rejected.
    """

    model_config = ConfigDict(extra="forbid")

    title: Optional[str] = Field(default=None, description="The name of a coffee.")
    brand: Optional[str] = Field(default=None, description="The brand of a coffee.")
    flavours: Optional[List[str]] = Field(
        default=None,
        description="Replaces the full flavour set when present.",
    )

    @field_validator("title", "brand", "flavours")
    @classmethod
    def reject_null(cls, v):
        if v is None:
            raise ValueError("must not be null")
        return v


class PaginationQuery(BaseModel):
    """
    Offset pagination for GET /coffees.

    limit:  rows per page (1..MAX_PAGE_LIMIT, default DEFAULT_PAGE_LIMIT)
    offset: rows to skip (>= 0, default 0)
    """

    model_config = ConfigDict(extra="forbid")

    limit: int = Field(default=settings.default_page_limit, ge=1, le=settings.max_page_limit)
    offset: int = Field(default=0, ge=0)


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class FlavourResponse(BaseModel):
    id: int = Field(description="Flavour identifier")
    name: str = Field(description="Flavour name")

    model_config = ConfigDict(from_attributes=True)


class CoffeeResponse(BaseModel):
    """Full representation of a coffee, flavours included."""

    id: int = Field(description="Coffee identifier")
    title: str = Field(description="The name of a coffee")
    brand: str = Field(description="The brand of a coffee")
    description: str = Field(default="", description="Free-text description")
    recommendations: int = Field(default=0, description="How often it was recommended")
    flavours: List[FlavourResponse] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)
