"""Subcategory repository."""

from typing import Optional

from catalog.models import SUBCATEGORY
from catalog.repositories.base import BaseRepository
from catalog.repositories.projections import (
    SUBCATEGORY_SHALLOW,
    SUBCATEGORY_WITH_CATEGORY,
    SUBCATEGORY_WITH_PRODUCTS,
)
from catalog.schemas.entities import (
    SubcategoryEntity,
    SubcategoryWithCategory,
    SubcategoryWithProducts,
)
from catalog.schemas.paging import PagedResult


class SubcategoryRepository(BaseRepository[SubcategoryEntity]):
    """Repository for subcategory data access. Sorted by name."""

    resource = SUBCATEGORY
    default_projection = SUBCATEGORY_SHALLOW

    async def get_page_for_category(
        self,
        category_id: int,
        page_number: int,
        page_size: int,
        with_products: bool = False,
    ) -> PagedResult[SubcategoryEntity]:
        """Page of the live subcategories of one category."""
        projection = SUBCATEGORY_WITH_PRODUCTS if with_products else SUBCATEGORY_SHALLOW
        return await self.get_page(
            page_number,
            page_size,
            SUBCATEGORY.table.c.category_id == category_id,
            projection=projection,
        )

    async def get_with_products(self, subcategory_id: int) -> Optional[SubcategoryWithProducts]:
        return await self.get_by_id(subcategory_id, projection=SUBCATEGORY_WITH_PRODUCTS)

    async def get_with_category(self, subcategory_id: int) -> Optional[SubcategoryWithCategory]:
        return await self.get_by_id(subcategory_id, projection=SUBCATEGORY_WITH_CATEGORY)
