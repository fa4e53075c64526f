"""Subcategory endpoints."""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from catalog.api.dependencies import Actor, Page, Services
from catalog.api.responses import committed_response, envelope_response
from catalog.schemas.entities import (
    ProductEntity,
    SubcategoryEntity,
    SubcategoryWithProducts,
)
from catalog.schemas.envelope import ServiceResponse
from catalog.schemas.paging import PagedResult
from catalog.schemas.requests import SubcategoryCreateRequest

router = APIRouter(tags=["subcategories"])


@router.get(
    "/subcategories/{subcategory_id}",
    response_model=ServiceResponse[SubcategoryWithProducts],
    summary="Get subcategory by ID",
    description="Embeds the parent category, or the products when with_products is set.",
)
async def get_subcategory(
    subcategory_id: int,
    services: Services,
    with_products: bool = False,
) -> JSONResponse:
    envelope = await services.subcategories.get_subcategory(
        subcategory_id, with_products=with_products
    )
    return envelope_response(envelope)


@router.get(
    "/subcategories/{subcategory_id}/products",
    response_model=ServiceResponse[PagedResult[ProductEntity]],
    summary="List the products of a subcategory",
)
async def list_subcategory_products(
    subcategory_id: int,
    services: Services,
    page: Page,
) -> JSONResponse:
    envelope = await services.products.list_for_subcategory(
        subcategory_id, page.page, page.page_size
    )
    return envelope_response(envelope)


@router.post(
    "/subcategories",
    response_model=ServiceResponse[SubcategoryEntity],
    status_code=status.HTTP_201_CREATED,
    summary="Create subcategory",
)
async def create_subcategory(
    request: SubcategoryCreateRequest,
    services: Services,
    actor: Actor,
) -> JSONResponse:
    envelope = await services.subcategories.create_subcategory(request, actor=actor)
    return await committed_response(services, envelope, success_status=status.HTTP_201_CREATED)


@router.delete(
    "/subcategories/{subcategory_id}",
    response_model=ServiceResponse[bool],
    summary="Soft-delete subcategory",
)
async def delete_subcategory(subcategory_id: int, services: Services, actor: Actor) -> JSONResponse:
    envelope = await services.subcategories.delete_subcategory(subcategory_id, actor=actor)
    return await committed_response(services, envelope)
