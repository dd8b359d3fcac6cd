"""Product operations for sellers and shoppers."""

import logging
from typing import List

from errors import DuplicateProduct, InputError, NotFound, PermissionDenied
from .models import ProductCreate, ProductResponse, ProductUpdate
from .paging import clamp_page
from .repository import ProductRepository

logger = logging.getLogger(__name__)


class ProductService:
    """Validates and persists products on behalf of the request context."""

    def __init__(self, products: ProductRepository):
        self.products = products

    async def create(self, context, category_id, payload: ProductCreate) -> ProductResponse:
        """Create a product for the calling seller in a category.

        Args:
            context: Request context; its user becomes the seller
            category_id: Category of the product
            payload: Validated product fields

        Returns:
            The created product

        Raises:
            DuplicateProduct: If a product with the same title exists
            NotFound: If the category does not exist
        """
        if payload is None:
            raise InputError("empty product payload")

        # Check-then-insert; concurrent creates with the same title can both pass
        existing = await self.products.get_by_title(payload.title)
        if existing is not None:
            logger.info(f"Product title {payload.title!r} already exists")
            raise DuplicateProduct()

        product = await self.products.create(
            context.user_id,
            category_id,
            payload.title,
            payload.description,
            payload.price
        )
        logger.info(f"Seller {context.user_id} created product {product.id}")
        return ProductResponse.from_product(product)

    async def get_by_title(self, title: str) -> ProductResponse:
        """Get a product by its exact title.

        Raises:
            InputError: If the title is empty
            NotFound: If no product has this title
        """
        if not title:
            raise InputError("empty title")

        product = await self.products.get_by_title(title)
        if product is None:
            raise NotFound("product not found")
        return ProductResponse.from_product(product)

    async def update(self, context, product_id, payload: ProductUpdate) -> ProductResponse:
        """Update one of the caller's products.

        category_id, title and price are always written; description and
        is_active only when supplied.

        Raises:
            NotFound: If the product or the target category does not exist
            PermissionDenied: If the product belongs to another seller
            DuplicateProduct: If the new title is taken by another product
        """
        product = await self.products.get_by_id(product_id)
        if product is None:
            raise NotFound("product not found")
        if product.seller_id != context.user_id:
            raise PermissionDenied("product belongs to another seller")

        if payload.title != product.title:
            existing = await self.products.get_by_title(payload.title)
            if existing is not None and existing.id != product.id:
                raise DuplicateProduct()

        fields = payload.model_dump(exclude_unset=True)
        await self.products.update(product_id, context.user_id, fields)

        updated = product.model_copy(update=fields)
        logger.info(f"Seller {context.user_id} updated product {product_id}")
        return ProductResponse.from_product(updated)

    async def delete(self, context, product_id) -> None:
        """Delete one of the caller's products.

        Deleting a missing or foreign product affects no rows and still succeeds.
        """
        count = await self.products.delete(product_id, context.user_id)
        if count:
            logger.info(f"Seller {context.user_id} deleted product {product_id}")

    async def list(self, category_id, limit: int, offset: int) -> List[ProductResponse]:
        """List the products of a category with clamped paging."""
        limit, offset = clamp_page('list products', limit, offset)
        products = await self.products.list(category_id, limit, offset)
        return [ProductResponse.from_product(product) for product in products]
