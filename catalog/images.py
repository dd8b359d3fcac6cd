"""Product image operations."""

import logging
from typing import List

from errors import NotFound, PermissionDenied
from .models import ImageCreate, ImageResponse
from .paging import DEFAULT_IMAGE_LIMIT, MAX_IMAGE_LIMIT, clamp_page
from .repository import ImageRepository, ProductRepository

logger = logging.getLogger(__name__)


class ImageService:

    def __init__(self, images: ImageRepository, products: ProductRepository):
        self.images = images
        self.products = products

    async def create(self, context, product_id, payload: ImageCreate) -> ImageResponse:
        """Attach an image to one of the caller's products.

        Raises:
            NotFound: If the product does not exist
            PermissionDenied: If the product belongs to another seller
        """
        product = await self.products.get_by_id(product_id)
        if product is None:
            raise NotFound("product not found")
        if product.seller_id != context.user_id:
            raise PermissionDenied("product belongs to another seller")

        image = await self.images.create(product_id, payload.url)
        logger.info(f"Added image {image.id} to product {product_id}")
        return ImageResponse.from_image(image)

    async def get_by_id(self, image_id) -> ImageResponse:
        image = await self.images.get_by_id(image_id)
        if image is None:
            raise NotFound("image not found")
        return ImageResponse.from_image(image)

    async def delete(self, context, image_id) -> None:
        await self.images.delete(image_id, context.user_id)

    async def list_by_product(self, product_id, limit: int, offset: int) -> List[ImageResponse]:
        limit, offset = clamp_page(
            'list product images',
            limit,
            offset,
            default_limit=DEFAULT_IMAGE_LIMIT,
            max_limit=MAX_IMAGE_LIMIT
        )
        images = await self.images.list_by_product(product_id, limit, offset)
        return [ImageResponse.from_image(image) for image in images]
