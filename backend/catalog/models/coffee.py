"""
Coffee Catalog Backend: Coffee & Flavour Models
=================================================

What:  ORM models for the `coffees` and `flavours` tables and the
       `coffees_flavours` join table between them.
Who:   SqlAlchemyCatalogStore (queries), Alembic (migrations), and the
       response schemas (serialization via from_attributes).

Table Design:
    - Coffee owns the relationship: saving a Coffee inserts any pending
      Flavour rows and join rows it references.
    - Deleting a Coffee removes its join rows (ORM + ON DELETE CASCADE) but
      never the Flavour rows, which other coffees may share.
    - flavours.name is UNIQUE: find-before-create keeps names distinct in
      normal operation and the constraint catches concurrent duplicates.
"""

from typing import List

from sqlalchemy import Column, ForeignKey, Integer, String, Table, Text, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from catalog.database import Base


coffees_flavours = Table(
    "coffees_flavours",
    Base.metadata,
    Column(
        "coffee_id",
        Integer,
        ForeignKey("coffees.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "flavour_id",
        Integer,
        ForeignKey("flavours.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)


class Coffee(Base):
    """
    A named, branded coffee with flavour tags and a recommendation counter.

    Lifecycle:
        1. Created by CoffeeService.create (recommendations = 0, description = "")
        2. Fields / flavour set replaced by CoffeeService.update
        3. Counter incremented by CoffeeService.recommend
        4. Deleted by CoffeeService.remove
    """

    __tablename__ = "coffees"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    title: Mapped[str] = mapped_column(String(255), nullable=False)

    brand: Mapped[str] = mapped_column(String(255), nullable=False)

    description: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        default="",
        server_default=text("''"),
    )

    # Non-negative; only ever changed by +1 in recommend
    recommendations: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        server_default=text("0"),
    )

    # order_by keeps the serialized list stable across loads
    flavours: Mapped[List["Flavour"]] = relationship(
        secondary=coffees_flavours,
        back_populates="coffees",
        order_by="Flavour.id",
    )

    def __repr__(self) -> str:
        return f"<Coffee(id={self.id}, title='{self.title}', brand='{self.brand}')>"


class Flavour(Base):
    """A shared, deduplicated flavour tag."""

    __tablename__ = "flavours"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)

    # Back-reference only; the service never mutates it
    coffees: Mapped[List[Coffee]] = relationship(
        secondary=coffees_flavours,
        back_populates="flavours",
    )

    def __repr__(self) -> str:
        return f"<Flavour(id={self.id}, name='{self.name}')>"
