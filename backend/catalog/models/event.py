"""
Coffee Catalog Backend: Event Model
====================================

What:  Append-only audit rows. The only writer is CoffeeService.recommend,
       which records `recommend_coffee` / `coffee` with `{"coffeeId": <id>}`.
Who:   SqlAlchemyCatalogStore.construct_event, Alembic.

Rows are never updated or deleted by the application.
"""

from typing import Any, Dict

from sqlalchemy import JSON, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from catalog.database import Base


class Event(Base):
    __tablename__ = "events"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    type: Mapped[str] = mapped_column(String(100), nullable=False)

    name: Mapped[str] = mapped_column(String(100), nullable=False, index=True)

    payload: Mapped[Dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)

    # Lookups are "all events of this name and type"
    __table_args__ = (
        Index("ix_events_name_type", "name", "type"),
    )

    def __repr__(self) -> str:
        return f"<Event(id={self.id}, name='{self.name}', type='{self.type}')>"
