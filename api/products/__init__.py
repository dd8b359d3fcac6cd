"""Product API endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, Security, status

from auth import RequestContext, get_request_context, require_role
from catalog import ProductService
from catalog.models import ProductCreate, ProductUpdate
from identity import Role
from ..responses import no_content, success
from ..services import get_product_service

DEFAULT_PAGE_SIZE = 10

router = APIRouter(tags=["Products"])

require_seller = require_role(Role.SELLER)


@router.get("/products/title/{title}")
async def get_product_by_title(
    title: str,
    context: RequestContext = Security(get_request_context),
    service: ProductService = Depends(get_product_service)
):
    """Get a product by its exact title."""
    return success(await service.get_by_title(title))


@router.get("/categories/{category_id}/products")
async def list_products(
    category_id: UUID,
    limit: int = Query(DEFAULT_PAGE_SIZE),
    offset: int = Query(0),
    context: RequestContext = Security(get_request_context),
    service: ProductService = Depends(get_product_service)
):
    """List the products of a category."""
    return success(await service.list(category_id, limit, offset))


@router.post("/categories/{category_id}/products", status_code=status.HTTP_201_CREATED)
async def create_product(
    category_id: UUID,
    request: ProductCreate,
    context: RequestContext = Security(require_seller),
    service: ProductService = Depends(get_product_service)
):
    """Create a product owned by the calling seller."""
    product = await service.create(context, category_id, request)
    return success(product, status.HTTP_201_CREATED)


@router.put("/products/{product_id}")
async def update_product(
    product_id: UUID,
    request: ProductUpdate,
    context: RequestContext = Security(require_seller),
    service: ProductService = Depends(get_product_service)
):
    """Update one of the calling seller's products."""
    return success(await service.update(context, product_id, request))


@router.delete("/products/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_product(
    product_id: UUID,
    context: RequestContext = Security(require_seller),
    service: ProductService = Depends(get_product_service)
):
    """Delete one of the calling seller's products."""
    await service.delete(context, product_id)
    return no_content()


# Export the router
__all__ = ['router']
