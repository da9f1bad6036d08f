# Repositories package init
"""
Coffee Catalog Backend: Catalog Store Package
===============================================

    - base.py:             CatalogStore / UnitOfWork interfaces
    - sqlalchemy_store.py: relational implementation (production)
    - memory.py:           in-memory implementation (tests)
"""

from catalog.repositories.base import CatalogStore, UnitOfWork

__all__ = ["CatalogStore", "UnitOfWork"]
