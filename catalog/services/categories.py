"""
Category service.

Business operations on categories. Every method returns a ServiceResponse.
"""

from typing import Optional

from catalog.core.context import StorageContext
from catalog.core.errors import InvalidArgumentError
from catalog.repositories.category import CategoryRepository
from catalog.schemas.entities import CategoryEntity
from catalog.schemas.envelope import ServiceResponse
from catalog.schemas.paging import PagedResult
from catalog.schemas.requests import CategoryCreateRequest, CategoryUpdateRequest
from catalog.services.base import BaseService


class CategoryService(BaseService):
    """Service for category listing, lookup and maintenance."""

    resource_name = "category"

    def __init__(self, context: StorageContext, categories: CategoryRepository):
        super().__init__(context)
        self.categories = categories

    async def list_categories(
        self,
        page_number: int,
        page_size: int,
        with_subcategories: bool = False,
    ) -> ServiceResponse[PagedResult]:
        if with_subcategories:
            return await self.execute(
                "list categories",
                lambda: self.categories.get_page_with_subcategories(page_number, page_size),
            )
        return await self.execute(
            "list categories",
            lambda: self.categories.get_page(page_number, page_size),
        )

    async def get_category_tree(self, page_number: int, page_size: int) -> ServiceResponse[PagedResult]:
        return await self.execute(
            "load category tree",
            lambda: self.categories.get_tree(page_number, page_size),
        )

    async def search_categories(
        self,
        term: str,
        page_number: int,
        page_size: int,
    ) -> ServiceResponse[PagedResult]:
        return await self.execute(
            "search categories",
            lambda: self.categories.search_by_name(term, page_number, page_size),
        )

    async def get_category(
        self,
        category_id: int,
        with_subcategories: bool = False,
    ) -> ServiceResponse[CategoryEntity]:
        load = (
            self.categories.get_with_subcategories if with_subcategories
            else self.categories.get_by_id
        )
        return await self.execute(
            "load category",
            lambda: load(category_id),
            not_found=f"Category {category_id} not found",
        )

    async def create_category(
        self,
        request: CategoryCreateRequest,
        actor: Optional[str] = None,
    ) -> ServiceResponse[CategoryEntity]:
        async def create() -> CategoryEntity:
            if await self.categories.name_exists(request.name):
                raise InvalidArgumentError(f"Category '{request.name}' already exists")
            return await self.categories.add(request.model_dump(), actor=actor)

        return await self.execute("create category", create, success_message="Category created")

    async def update_category(
        self,
        category_id: int,
        request: CategoryUpdateRequest,
        actor: Optional[str] = None,
    ) -> ServiceResponse[CategoryEntity]:
        """Apply the fields set on ``request``; a new name must stay unique."""
        async def update() -> Optional[CategoryEntity]:
            values = request.model_dump(exclude_unset=True)
            name = values.get("name")
            if name is not None and await self.categories.name_exists(name, excluding_id=category_id):
                raise InvalidArgumentError(f"Category '{name}' already exists")
            return await self.categories.update(category_id, values, actor=actor)

        return await self.execute(
            "update category",
            update,
            not_found=f"Category {category_id} not found",
            success_message="Category updated",
        )

    async def delete_category(
        self,
        category_id: int,
        actor: Optional[str] = None,
    ) -> ServiceResponse[bool]:
        """Soft-delete a category. Its subcategories are left untouched."""
        async def delete() -> Optional[bool]:
            deleted = await self.categories.soft_delete(category_id, actor=actor)
            return True if deleted else None

        return await self.execute(
            "delete category",
            delete,
            not_found=f"Category {category_id} not found",
            success_message="Category deleted",
        )

    async def restore_category(
        self,
        category_id: int,
        actor: Optional[str] = None,
    ) -> ServiceResponse[CategoryEntity]:
        return await self.execute(
            "restore category",
            lambda: self.categories.restore(category_id, actor=actor),
            not_found=f"Deleted category {category_id} not found",
            success_message="Category restored",
        )
