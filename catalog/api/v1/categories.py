"""
Category endpoints.

Thin dispatch: parse parameters, call the CategoryService, turn the
envelope into a response.
"""

from typing import Annotated

from fastapi import APIRouter, Query, status
from fastapi.responses import JSONResponse

from catalog.api.dependencies import Actor, Page, Services
from catalog.api.responses import committed_response, envelope_response
from catalog.schemas.entities import (
    CategoryEntity,
    CategoryTree,
    CategoryWithSubcategories,
    SubcategoryEntity,
)
from catalog.schemas.envelope import ServiceResponse
from catalog.schemas.paging import PagedResult
from catalog.schemas.requests import CategoryCreateRequest, CategoryUpdateRequest

router = APIRouter(tags=["categories"])


@router.get(
    "/categories",
    response_model=ServiceResponse[PagedResult[CategoryWithSubcategories]],
    summary="List categories",
    description="Page of live categories ordered by display order and name.",
)
async def list_categories(
    services: Services,
    page: Page,
    with_subcategories: bool = False,
) -> JSONResponse:
    envelope = await services.categories.list_categories(
        page.page, page.page_size, with_subcategories=with_subcategories
    )
    return envelope_response(envelope)


@router.get(
    "/categories/tree",
    response_model=ServiceResponse[PagedResult[CategoryTree]],
    summary="Category tree",
    description="Page of categories with their subcategories and products.",
)
async def get_category_tree(services: Services, page: Page) -> JSONResponse:
    envelope = await services.categories.get_category_tree(page.page, page.page_size)
    return envelope_response(envelope)


@router.get(
    "/categories/search",
    response_model=ServiceResponse[PagedResult[CategoryEntity]],
    summary="Search categories by name",
)
async def search_categories(
    services: Services,
    page: Page,
    q: Annotated[str, Query(min_length=1, max_length=200)],
) -> JSONResponse:
    envelope = await services.categories.search_categories(q, page.page, page.page_size)
    return envelope_response(envelope)


@router.get(
    "/categories/{category_id}",
    response_model=ServiceResponse[CategoryWithSubcategories],
    summary="Get category by ID",
)
async def get_category(
    category_id: int,
    services: Services,
    with_subcategories: bool = False,
) -> JSONResponse:
    envelope = await services.categories.get_category(
        category_id, with_subcategories=with_subcategories
    )
    return envelope_response(envelope)


@router.get(
    "/categories/{category_id}/subcategories",
    response_model=ServiceResponse[PagedResult[SubcategoryEntity]],
    summary="List the subcategories of a category",
)
async def list_category_subcategories(
    category_id: int,
    services: Services,
    page: Page,
    with_products: bool = False,
) -> JSONResponse:
    envelope = await services.subcategories.list_for_category(
        category_id, page.page, page.page_size, with_products=with_products
    )
    return envelope_response(envelope)


@router.post(
    "/categories",
    response_model=ServiceResponse[CategoryEntity],
    status_code=status.HTTP_201_CREATED,
    summary="Create category",
)
async def create_category(
    request: CategoryCreateRequest,
    services: Services,
    actor: Actor,
) -> JSONResponse:
    envelope = await services.categories.create_category(request, actor=actor)
    return await committed_response(services, envelope, success_status=status.HTTP_201_CREATED)


@router.patch(
    "/categories/{category_id}",
    response_model=ServiceResponse[CategoryEntity],
    summary="Update category",
)
async def update_category(
    category_id: int,
    request: CategoryUpdateRequest,
    services: Services,
    actor: Actor,
) -> JSONResponse:
    envelope = await services.categories.update_category(category_id, request, actor=actor)
    return await committed_response(services, envelope)


@router.delete(
    "/categories/{category_id}",
    response_model=ServiceResponse[bool],
    summary="Soft-delete category",
)
async def delete_category(category_id: int, services: Services, actor: Actor) -> JSONResponse:
    envelope = await services.categories.delete_category(category_id, actor=actor)
    return await committed_response(services, envelope)


@router.post(
    "/categories/{category_id}/restore",
    response_model=ServiceResponse[CategoryEntity],
    summary="Restore a soft-deleted category",
)
async def restore_category(category_id: int, services: Services, actor: Actor) -> JSONResponse:
    envelope = await services.categories.restore_category(category_id, actor=actor)
    return await committed_response(services, envelope)
