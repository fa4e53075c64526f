"""Subcategory service."""

from typing import Optional

from catalog.core.context import StorageContext
from catalog.core.errors import InvalidArgumentError
from catalog.repositories.category import CategoryRepository
from catalog.repositories.subcategory import SubcategoryRepository
from catalog.schemas.entities import SubcategoryEntity
from catalog.schemas.envelope import ServiceResponse
from catalog.schemas.paging import PagedResult
from catalog.schemas.requests import SubcategoryCreateRequest
from catalog.services.base import BaseService


class SubcategoryService(BaseService):
    """
    Service for subcategories.

    A subcategory can only be created under a live category.
    """

    resource_name = "subcategory"

    def __init__(
        self,
        context: StorageContext,
        subcategories: SubcategoryRepository,
        categories: CategoryRepository,
    ):
        super().__init__(context)
        self.subcategories = subcategories
        self.categories = categories

    async def list_for_category(
        self,
        category_id: int,
        page_number: int,
        page_size: int,
        with_products: bool = False,
    ) -> ServiceResponse[PagedResult]:
        return await self.execute(
            "list subcategories",
            lambda: self.subcategories.get_page_for_category(
                category_id, page_number, page_size, with_products=with_products
            ),
        )

    async def get_subcategory(
        self,
        subcategory_id: int,
        with_products: bool = False,
    ) -> ServiceResponse[SubcategoryEntity]:
        load = (
            self.subcategories.get_with_products if with_products
            else self.subcategories.get_with_category
        )
        return await self.execute(
            "load subcategory",
            lambda: load(subcategory_id),
            not_found=f"Subcategory {subcategory_id} not found",
        )

    async def create_subcategory(
        self,
        request: SubcategoryCreateRequest,
        actor: Optional[str] = None,
    ) -> ServiceResponse[SubcategoryEntity]:
        async def create() -> SubcategoryEntity:
            if not await self.categories.exists(request.category_id):
                raise InvalidArgumentError(f"Category {request.category_id} does not exist")
            return await self.subcategories.add(request.model_dump(), actor=actor)

        return await self.execute("create subcategory", create, success_message="Subcategory created")

    async def delete_subcategory(
        self,
        subcategory_id: int,
        actor: Optional[str] = None,
    ) -> ServiceResponse[bool]:
        async def delete() -> Optional[bool]:
            return True if await self.subcategories.soft_delete(subcategory_id, actor=actor) else None

        return await self.execute(
            "delete subcategory",
            delete,
            not_found=f"Subcategory {subcategory_id} not found",
            success_message="Subcategory deleted",
        )
