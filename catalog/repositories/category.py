"""
Category repository.

Categories sort by display_order, then name. Besides the generic page
and lookup operations it offers the deep listings (with subcategories,
and the full category tree) and a case-insensitive name search.
"""

from typing import Optional

from sqlalchemy import func

from catalog.core.errors import InvalidArgumentError
from catalog.models import CATEGORY
from catalog.repositories.base import BaseRepository
from catalog.repositories.projections import (
    CATEGORY_SHALLOW,
    CATEGORY_TREE,
    CATEGORY_WITH_ALL_SUBCATEGORIES,
    CATEGORY_WITH_SUBCATEGORIES,
)
from catalog.schemas.entities import (
    CategoryEntity,
    CategoryTree,
    CategoryWithSubcategories,
)
from catalog.schemas.paging import PagedResult


class CategoryRepository(BaseRepository[CategoryEntity]):
    """Repository for category data access."""

    resource = CATEGORY
    default_projection = CATEGORY_SHALLOW

    async def get_page_with_subcategories(
        self,
        page_number: int,
        page_size: int,
    ) -> PagedResult[CategoryWithSubcategories]:
        """Page of categories, each embedding its live subcategories (by name)."""
        return await self.get_page(
            page_number,
            page_size,
            projection=CATEGORY_WITH_SUBCATEGORIES,
        )

    async def get_tree(
        self,
        page_number: int,
        page_size: int,
    ) -> PagedResult[CategoryTree]:
        """Page of categories with subcategories and their products."""
        return await self.get_page(page_number, page_size, projection=CATEGORY_TREE)

    async def get_with_subcategories(self, category_id: int) -> Optional[CategoryWithSubcategories]:
        return await self.get_by_id(category_id, projection=CATEGORY_WITH_SUBCATEGORIES)

    async def get_with_all_subcategories(self, category_id: int) -> Optional[CategoryWithSubcategories]:
        """Live category embedding every subcategory, soft-deleted ones included."""
        return await self.get_by_id(category_id, projection=CATEGORY_WITH_ALL_SUBCATEGORIES)

    async def search_by_name(
        self,
        term: str,
        page_number: int,
        page_size: int,
    ) -> PagedResult[CategoryEntity]:
        """
        Page of categories whose name contains ``term`` (case-insensitive).

        Raises:
            InvalidArgumentError: If term is blank
        """
        term = (term or "").strip()
        if not term:
            raise InvalidArgumentError("search term cannot be blank")
        pattern = f"%{_escape_like(term.lower())}%"
        criterion = func.lower(CATEGORY.table.c.name).like(pattern, escape="\\")
        return await self.get_page(page_number, page_size, criterion)

    async def name_exists(self, name: str, excluding_id: Optional[int] = None) -> bool:
        """Whether a live category other than ``excluding_id`` has this name (case-insensitive)."""
        table = CATEGORY.table
        criteria = [func.lower(table.c.name) == name.strip().lower()]
        if excluding_id is not None:
            criteria.append(table.c.id != excluding_id)
        return await self.count(*criteria) > 0


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
