"""Product endpoints."""

from decimal import Decimal
from typing import Annotated, Optional

from fastapi import APIRouter, Query, status
from fastapi.responses import JSONResponse

from catalog.api.dependencies import Actor, Page, Services
from catalog.api.responses import committed_response, envelope_response
from catalog.schemas.entities import ProductEntity, ProductWithSubcategory
from catalog.schemas.envelope import ServiceResponse
from catalog.schemas.paging import PagedResult
from catalog.schemas.requests import ProductCreateRequest, ProductUpdateRequest

router = APIRouter(tags=["products"])


@router.get(
    "/products",
    response_model=ServiceResponse[PagedResult[ProductEntity]],
    summary="List products",
    description="Ordered by name; ordered by price when a price bound is given.",
)
async def list_products(
    services: Services,
    page: Page,
    min_price: Annotated[Optional[Decimal], Query(ge=0)] = None,
    max_price: Annotated[Optional[Decimal], Query(ge=0)] = None,
) -> JSONResponse:
    envelope = await services.products.list_products(
        page.page, page.page_size, min_price=min_price, max_price=max_price
    )
    return envelope_response(envelope)


@router.get(
    "/products/by-sku/{sku}",
    response_model=ServiceResponse[ProductWithSubcategory],
    summary="Find product by SKU",
)
async def find_product_by_sku(sku: str, services: Services) -> JSONResponse:
    envelope = await services.products.find_by_sku(sku)
    return envelope_response(envelope)


@router.get(
    "/products/{product_id}",
    response_model=ServiceResponse[ProductEntity],
    summary="Get product by ID",
)
async def get_product(product_id: int, services: Services) -> JSONResponse:
    envelope = await services.products.get_product(product_id)
    return envelope_response(envelope)


@router.post(
    "/products",
    response_model=ServiceResponse[ProductEntity],
    status_code=status.HTTP_201_CREATED,
    summary="Create product",
)
async def create_product(
    request: ProductCreateRequest,
    services: Services,
    actor: Actor,
) -> JSONResponse:
    envelope = await services.products.create_product(request, actor=actor)
    return await committed_response(services, envelope, success_status=status.HTTP_201_CREATED)


@router.patch(
    "/products/{product_id}",
    response_model=ServiceResponse[ProductEntity],
    summary="Update product",
)
async def update_product(
    product_id: int,
    request: ProductUpdateRequest,
    services: Services,
    actor: Actor,
) -> JSONResponse:
    envelope = await services.products.update_product(product_id, request, actor=actor)
    return await committed_response(services, envelope)


@router.delete(
    "/products/{product_id}",
    response_model=ServiceResponse[bool],
    summary="Soft-delete product",
)
async def delete_product(product_id: int, services: Services, actor: Actor) -> JSONResponse:
    envelope = await services.products.delete_product(product_id, actor=actor)
    return await committed_response(services, envelope)
