"""
Coffee Catalog Backend: Application Package
============================================

What: The `catalog` package: a REST API over a catalog of coffees and their
      shared flavour tags.
Who:  Imported by uvicorn (`catalog.main:app`), Alembic, and pytest.

Layering:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns, guards
    ├─────────────────────────────────────┤
    │        Services (Business Logic)    │  ← find-or-create, recommend
    ├─────────────────────────────────────┤
    │   Repositories (Catalog Store)      │  ← SQLAlchemy / in-memory
    ├─────────────────────────────────────┤
    │     Models & Schemas (Data)         │  ← ORM tables + Pydantic DTOs
    └─────────────────────────────────────┘

    Routes never touch the ORM directly; services never see HTTP.
"""

__version__ = "1.0.0"
