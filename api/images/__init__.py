"""Product image API endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, Security, status

from auth import RequestContext, get_request_context, require_role
from catalog import ImageService
from catalog.models import ImageCreate
from identity import Role
from ..responses import no_content, success
from ..services import get_image_service

DEFAULT_PAGE_SIZE = 10

router = APIRouter(tags=["Images"])

require_seller = require_role(Role.SELLER)


@router.get("/products/{product_id}/images")
async def list_images(
    product_id: UUID,
    limit: int = Query(DEFAULT_PAGE_SIZE),
    offset: int = Query(0),
    context: RequestContext = Security(get_request_context),
    service: ImageService = Depends(get_image_service)
):
    """List the images of a product."""
    return success(await service.list_by_product(product_id, limit, offset))


@router.post("/products/{product_id}/images", status_code=status.HTTP_201_CREATED)
async def create_image(
    product_id: UUID,
    request: ImageCreate,
    context: RequestContext = Security(require_seller),
    service: ImageService = Depends(get_image_service)
):
    """Attach an image URL to one of the calling seller's products."""
    image = await service.create(context, product_id, request)
    return success(image, status.HTTP_201_CREATED)


@router.get("/images/{image_id}")
async def get_image(
    image_id: UUID,
    context: RequestContext = Security(get_request_context),
    service: ImageService = Depends(get_image_service)
):
    return success(await service.get_by_id(image_id))


@router.delete("/images/{image_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_image(
    image_id: UUID,
    context: RequestContext = Security(require_seller),
    service: ImageService = Depends(get_image_service)
):
    """Delete an image of one of the calling seller's products."""
    await service.delete(context, image_id)
    return no_content()


# Export the router
__all__ = ['router']
