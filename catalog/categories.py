"""Category operations."""

import logging
from typing import List

from errors import NotFound
from .models import CategoryResponse, CategoryWrite
from .paging import clamp_page
from .repository import CategoryRepository

logger = logging.getLogger(__name__)


class CategoryService:

    def __init__(self, categories: CategoryRepository):
        self.categories = categories

    async def create(self, payload: CategoryWrite) -> CategoryResponse:
        category = await self.categories.create(payload.name)
        logger.info(f"Created category {category.id}")
        return CategoryResponse.from_category(category)

    async def get_by_id(self, category_id) -> CategoryResponse:
        """Get a category.

        Raises:
            NotFound: If the category does not exist
        """
        category = await self.categories.get_by_id(category_id)
        if category is None:
            raise NotFound("category not found")
        return CategoryResponse.from_category(category)

    async def update(self, category_id, payload: CategoryWrite) -> CategoryResponse:
        await self.categories.update(category_id, payload.name)
        return CategoryResponse(id=category_id, name=payload.name)

    async def delete(self, category_id) -> None:
        await self.categories.delete(category_id)

    async def list(self, limit: int, offset: int) -> List[CategoryResponse]:
        limit, offset = clamp_page('list categories', limit, offset)
        categories = await self.categories.list(limit, offset)
        return [CategoryResponse.from_category(category) for category in categories]
