"""
Repository layer for data access.

Provides data access abstractions following the Repository pattern,
isolating query composition, soft-delete filtering, pagination and entity
projection from business logic.
"""

from catalog.repositories.base import BaseRepository, validate_page
from catalog.repositories.category import CategoryRepository
from catalog.repositories.product import ProductRepository
from catalog.repositories.projection import Projection
from catalog.repositories.query import QueryBuilder
from catalog.repositories.subcategory import SubcategoryRepository

__all__ = [
    "BaseRepository",
    "CategoryRepository",
    "ProductRepository",
    "Projection",
    "QueryBuilder",
    "SubcategoryRepository",
    "validate_page",
]
