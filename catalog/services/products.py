"""
Product service.

Products are created under a live subcategory and identified externally by
SKU. A SKU stays reserved after its product is soft-deleted.
"""

from decimal import Decimal
from typing import Optional

from catalog.core.context import StorageContext
from catalog.core.errors import InvalidArgumentError
from catalog.repositories.product import ProductRepository
from catalog.repositories.subcategory import SubcategoryRepository
from catalog.schemas.entities import ProductEntity
from catalog.schemas.envelope import ServiceResponse
from catalog.schemas.paging import PagedResult
from catalog.schemas.requests import ProductCreateRequest, ProductUpdateRequest
from catalog.services.base import BaseService


class ProductService(BaseService):
    """Service for product listing, lookup and maintenance."""

    resource_name = "product"

    def __init__(
        self,
        context: StorageContext,
        products: ProductRepository,
        subcategories: SubcategoryRepository,
    ):
        super().__init__(context)
        self.products = products
        self.subcategories = subcategories

    async def list_products(
        self,
        page_number: int,
        page_size: int,
        min_price: Optional[Decimal] = None,
        max_price: Optional[Decimal] = None,
    ) -> ServiceResponse[PagedResult]:
        if min_price is None and max_price is None:
            return await self.execute(
                "list products",
                lambda: self.products.get_page(page_number, page_size),
            )
        return await self.execute(
            "list products",
            lambda: self.products.get_page_in_price_range(
                page_number, page_size, min_price=min_price, max_price=max_price
            ),
        )

    async def list_for_subcategory(
        self,
        subcategory_id: int,
        page_number: int,
        page_size: int,
    ) -> ServiceResponse[PagedResult]:
        return await self.execute(
            "list products",
            lambda: self.products.get_page_for_subcategory(subcategory_id, page_number, page_size),
        )

    async def get_product(self, product_id: int) -> ServiceResponse[ProductEntity]:
        return await self.execute(
            "load product",
            lambda: self.products.get_by_id(product_id),
            not_found=f"Product {product_id} not found",
        )

    async def find_by_sku(self, sku: str) -> ServiceResponse[ProductEntity]:
        return await self.execute(
            "find product",
            lambda: self.products.find_by_sku(sku),
            not_found=f"No product with SKU {sku!r}",
        )

    async def create_product(
        self,
        request: ProductCreateRequest,
        actor: Optional[str] = None,
    ) -> ServiceResponse[ProductEntity]:
        async def create() -> ProductEntity:
            if not await self.subcategories.exists(request.subcategory_id):
                raise InvalidArgumentError(
                    f"Subcategory {request.subcategory_id} does not exist"
                )
            if await self.products.sku_taken(request.sku):
                raise InvalidArgumentError(f"SKU {request.sku} is already in use")
            return await self.products.add(request.model_dump(), actor=actor)

        return await self.execute("create product", create, success_message="Product created")

    async def update_product(
        self,
        product_id: int,
        request: ProductUpdateRequest,
        actor: Optional[str] = None,
    ) -> ServiceResponse[ProductEntity]:
        return await self.execute(
            "update product",
            lambda: self.products.update(
                product_id, request.model_dump(exclude_unset=True), actor=actor
            ),
            not_found=f"Product {product_id} not found",
            success_message="Product updated",
        )

    async def delete_product(
        self,
        product_id: int,
        actor: Optional[str] = None,
    ) -> ServiceResponse[bool]:
        async def delete() -> Optional[bool]:
            return True if await self.products.soft_delete(product_id, actor=actor) else None

        return await self.execute(
            "delete product",
            delete,
            not_found=f"Product {product_id} not found",
            success_message="Product deleted",
        )
