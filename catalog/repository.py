"""Catalog persistence for categories, products and product images.

Lookups return None when no row matches. Writes run in their own
transaction. Updates and deletes return the number of affected rows and
log a warning when it is zero; callers treat that as success.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import asyncpg

from database import get_pool, transaction, rows_affected
from errors import NotFound, RepositoryError
from .models import Category, Product, ProductImage

logger = logging.getLogger(__name__)

CATEGORY_COLUMNS = 'id, name, created_at, updated_at'
PRODUCT_COLUMNS = (
    'id, seller_id, category_id, title, description, price, is_active, '
    'created_at, updated_at'
)
IMAGE_COLUMNS = 'id, product_id, url, created_at'


class BaseRepository:
    """Pool handling shared by the catalog repositories."""

    def __init__(self, pool=None):
        """Initialize repository.

        Args:
            pool: Optional database pool. If not provided, will get from database module.
        """
        self.pool = pool

    async def ensure_pool(self):
        """Ensure database pool is available."""
        if not self.pool:
            self.pool = await get_pool()

    async def _fetchrow(self, operation: str, query: str, *args):
        await self.ensure_pool()
        try:
            async with self.pool.acquire() as conn:
                return await conn.fetchrow(query, *args)
        except Exception as e:
            logger.error(f"Error during {operation}: {e}")
            raise RepositoryError(f"failed to {operation}", e)

    async def _fetch(self, operation: str, query: str, *args) -> List[Any]:
        await self.ensure_pool()
        try:
            async with self.pool.acquire() as conn:
                return await conn.fetch(query, *args)
        except Exception as e:
            logger.error(f"Error during {operation}: {e}")
            raise RepositoryError(f"failed to {operation}", e)

    async def _write(self, operation: str, query: str, *args) -> int:
        """Run a single write statement in a transaction and return its row count."""
        await self.ensure_pool()
        async with transaction(self.pool) as conn:
            status = await conn.execute(query, *args)

        count = rows_affected(status)
        if count == 0:
            # Zero rows is reported as success to the caller
            logger.warning(f"No rows affected during {operation}")
        return count

    async def _insert(self, operation: str, query: str, *args):
        await self.ensure_pool()
        try:
            async with transaction(self.pool) as conn:
                return await conn.fetchrow(query, *args)
        except RepositoryError as e:
            if isinstance(e.cause, asyncpg.exceptions.ForeignKeyViolationError):
                raise NotFound("referenced record not found", e.cause)
            logger.error(f"Error during {operation}: {e}")
            raise


class CategoryRepository(BaseRepository):

    async def create(self, name: str) -> Category:
        now = datetime.now(timezone.utc)
        row = await self._insert(
            'create category',
            f'''
            INSERT INTO categories (name, created_at, updated_at)
            VALUES ($1, $2, $2)
            RETURNING {CATEGORY_COLUMNS}
            ''',
            name,
            now
        )
        return Category(**dict(row))

    async def get_by_id(self, category_id) -> Optional[Category]:
        row = await self._fetchrow(
            'get category',
            f'SELECT {CATEGORY_COLUMNS} FROM categories WHERE id = $1 LIMIT 1',
            category_id
        )
        return Category(**dict(row)) if row else None

    async def update(self, category_id, name: str) -> int:
        return await self._write(
            'update category',
            'UPDATE categories SET name = $2, updated_at = $3 WHERE id = $1',
            category_id,
            name,
            datetime.now(timezone.utc)
        )

    async def delete(self, category_id) -> int:
        return await self._write(
            'delete category',
            'DELETE FROM categories WHERE id = $1',
            category_id
        )

    async def list(self, limit: int, offset: int) -> List[Category]:
        rows = await self._fetch(
            'list categories',
            f'''
            SELECT {CATEGORY_COLUMNS} FROM categories
            ORDER BY name, id
            LIMIT $1 OFFSET $2
            ''',
            limit,
            offset
        )
        return [Category(**dict(row)) for row in rows]


class ProductRepository(BaseRepository):

    async def create(
        self,
        seller_id,
        category_id,
        title: str,
        description: Optional[str],
        price
    ) -> Product:
        """Insert a product.

        Raises:
            NotFound: If the category or seller does not exist
            RepositoryError: If the insert fails
        """
        now = datetime.now(timezone.utc)
        row = await self._insert(
            'create product',
            f'''
            INSERT INTO products (
                seller_id, category_id, title, description, price,
                is_active, created_at, updated_at
            ) VALUES ($1, $2, $3, $4, $5, true, $6, $6)
            RETURNING {PRODUCT_COLUMNS}
            ''',
            seller_id,
            category_id,
            title,
            description,
            price,
            now
        )
        return Product(**dict(row))

    async def get_by_id(self, product_id) -> Optional[Product]:
        row = await self._fetchrow(
            'get product',
            f'SELECT {PRODUCT_COLUMNS} FROM products WHERE id = $1 LIMIT 1',
            product_id
        )
        return Product(**dict(row)) if row else None

    async def get_by_title(self, title: str) -> Optional[Product]:
        row = await self._fetchrow(
            'get product by title',
            f'SELECT {PRODUCT_COLUMNS} FROM products WHERE title = $1 LIMIT 1',
            title
        )
        return Product(**dict(row)) if row else None

    async def update(self, product_id, seller_id, fields: Dict[str, Any]) -> int:
        """Update a product owned by the seller.

        Args:
            product_id: Product to update
            seller_id: Only a product of this seller is touched
            fields: Column values to write

        Returns:
            Number of rows affected
        """
        updates = []
        params = [product_id, seller_id]
        for column in ('category_id', 'title', 'description', 'price', 'is_active'):
            if column not in fields:
                continue
            params.append(fields[column])
            updates.append(f"{column} = ${len(params)}")

        params.append(datetime.now(timezone.utc))
        updates.append(f"updated_at = ${len(params)}")

        try:
            return await self._write(
                'update product',
                f"UPDATE products SET {', '.join(updates)} WHERE id = $1 AND seller_id = $2",
                *params
            )
        except RepositoryError as e:
            if isinstance(e.cause, asyncpg.exceptions.ForeignKeyViolationError):
                raise NotFound("category not found", e.cause)
            raise

    async def delete(self, product_id, seller_id) -> int:
        return await self._write(
            'delete product',
            'DELETE FROM products WHERE id = $1 AND seller_id = $2',
            product_id,
            seller_id
        )

    async def list(self, category_id, limit: int, offset: int) -> List[Product]:
        rows = await self._fetch(
            'list products',
            f'''
            SELECT {PRODUCT_COLUMNS} FROM products
            WHERE category_id = $1
            ORDER BY created_at, id
            LIMIT $2 OFFSET $3
            ''',
            category_id,
            limit,
            offset
        )
        return [Product(**dict(row)) for row in rows]


class ImageRepository(BaseRepository):

    async def create(self, product_id, url: str) -> ProductImage:
        row = await self._insert(
            'create product image',
            f'''
            INSERT INTO product_images (product_id, url, created_at)
            VALUES ($1, $2, $3)
            RETURNING {IMAGE_COLUMNS}
            ''',
            product_id,
            url,
            datetime.now(timezone.utc)
        )
        return ProductImage(**dict(row))

    async def get_by_id(self, image_id) -> Optional[ProductImage]:
        row = await self._fetchrow(
            'get product image',
            f'SELECT {IMAGE_COLUMNS} FROM product_images WHERE id = $1 LIMIT 1',
            image_id
        )
        return ProductImage(**dict(row)) if row else None

    async def delete(self, image_id, seller_id) -> int:
        """Delete an image of a product owned by the seller."""
        return await self._write(
            'delete product image',
            '''
            DELETE FROM product_images i
            USING products p
            WHERE i.id = $1 AND p.id = i.product_id AND p.seller_id = $2
            ''',
            image_id,
            seller_id
        )

    async def list_by_product(self, product_id, limit: int, offset: int) -> List[ProductImage]:
        rows = await self._fetch(
            'list product images',
            f'''
            SELECT {IMAGE_COLUMNS} FROM product_images
            WHERE product_id = $1
            ORDER BY created_at, id
            LIMIT $2 OFFSET $3
            ''',
            product_id,
            limit,
            offset
        )
        return [ProductImage(**dict(row)) for row in rows]


__all__ = ['CategoryRepository', 'ProductRepository', 'ImageRepository']
