"""
Product repository.

Products sort by name. Filtered variants cover the owning subcategory,
a price range and SKU lookup.
"""

from decimal import Decimal
from typing import Optional

from catalog.core.errors import InvalidArgumentError
from catalog.models import PRODUCT
from catalog.repositories.base import BaseRepository
from catalog.repositories.projections import PRODUCT_SHALLOW, PRODUCT_WITH_SUBCATEGORY
from catalog.repositories.query import QueryBuilder
from catalog.schemas.entities import ProductEntity, ProductWithSubcategory
from catalog.schemas.paging import PagedResult


class ProductRepository(BaseRepository[ProductEntity]):
    """Repository for product data access."""

    resource = PRODUCT
    default_projection = PRODUCT_SHALLOW

    async def get_page_for_subcategory(
        self,
        subcategory_id: int,
        page_number: int,
        page_size: int,
    ) -> PagedResult[ProductEntity]:
        return await self.get_page(
            page_number,
            page_size,
            PRODUCT.table.c.subcategory_id == subcategory_id,
        )

    async def get_page_in_price_range(
        self,
        page_number: int,
        page_size: int,
        min_price: Optional[Decimal] = None,
        max_price: Optional[Decimal] = None,
    ) -> PagedResult[ProductEntity]:
        """
        Page of products priced within [min_price, max_price], cheapest first.

        Either bound may be omitted.

        Raises:
            InvalidArgumentError: If min_price > max_price
        """
        if min_price is not None and max_price is not None and min_price > max_price:
            raise InvalidArgumentError(
                f"min_price ({min_price}) cannot exceed max_price ({max_price})"
            )
        price = PRODUCT.table.c.price
        builder = (
            QueryBuilder.query_all(self.context, PRODUCT)
            .filter_out_deleted()
            .order_by("price", *PRODUCT.default_order)
        )
        return await self.get_page(
            page_number,
            page_size,
            price >= min_price if min_price is not None else None,
            price <= max_price if max_price is not None else None,
            builder=builder,
        )

    async def sku_taken(self, sku: str) -> bool:
        """True when any product, soft-deleted ones included, uses ``sku``."""
        builder = QueryBuilder.query_all(self.context, PRODUCT).where(
            PRODUCT.table.c.sku == sku.strip().upper()
        )
        return await builder.count() > 0

    async def find_by_sku(self, sku: str) -> Optional[ProductWithSubcategory]:
        builder = self.query().where(PRODUCT.table.c.sku == sku.strip().upper()).take(1)
        entities = await builder.to_entity_projection(PRODUCT_WITH_SUBCATEGORY)
        return entities[0] if entities else None
