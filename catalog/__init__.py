"""Catalog module: categories, products and product images."""

from .categories import CategoryService
from .images import ImageService
from .products import ProductService
from .repository import CategoryRepository, ImageRepository, ProductRepository

__all__ = [
    'CategoryRepository',
    'CategoryService',
    'ImageRepository',
    'ImageService',
    'ProductRepository',
    'ProductService',
]
