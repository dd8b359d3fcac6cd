"""Category API endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, Security, status

from auth import RequestContext, get_request_context, require_role
from catalog import CategoryService
from catalog.models import CategoryWrite
from identity import Role
from ..responses import no_content, success
from ..services import get_category_service

DEFAULT_PAGE_SIZE = 10

router = APIRouter(
    prefix="/categories",
    tags=["Categories"]
)

require_seller = require_role(Role.SELLER)


@router.get("")
async def list_categories(
    limit: int = Query(DEFAULT_PAGE_SIZE),
    offset: int = Query(0),
    context: RequestContext = Security(get_request_context),
    service: CategoryService = Depends(get_category_service)
):
    return success(await service.list(limit, offset))


@router.get("/{category_id}")
async def get_category(
    category_id: UUID,
    context: RequestContext = Security(get_request_context),
    service: CategoryService = Depends(get_category_service)
):
    return success(await service.get_by_id(category_id))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_category(
    request: CategoryWrite,
    context: RequestContext = Security(require_seller),
    service: CategoryService = Depends(get_category_service)
):
    category = await service.create(request)
    return success(category, status.HTTP_201_CREATED)


@router.put("/{category_id}")
async def update_category(
    category_id: UUID,
    request: CategoryWrite,
    context: RequestContext = Security(require_seller),
    service: CategoryService = Depends(get_category_service)
):
    return success(await service.update(category_id, request))


@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_category(
    category_id: UUID,
    context: RequestContext = Security(require_seller),
    service: CategoryService = Depends(get_category_service)
):
    await service.delete(category_id)
    return no_content()


# Export the router
__all__ = ['router']
