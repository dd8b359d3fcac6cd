from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID
from pydantic import BaseModel, Field


class Category(BaseModel):
    id: UUID
    name: str
    created_at: datetime
    updated_at: datetime


class Product(BaseModel):
    id: UUID
    seller_id: UUID
    category_id: UUID
    title: str
    description: Optional[str] = None
    price: Decimal
    is_active: bool = True
    created_at: datetime
    updated_at: datetime


class ProductImage(BaseModel):
    id: UUID
    product_id: UUID
    url: str
    created_at: datetime


class ProductCreate(BaseModel):
    title: str = Field(min_length=5, max_length=20)
    description: Optional[str] = Field(default=None, max_length=999)
    price: Decimal = Field(ge=0, max_digits=12, decimal_places=2)


class ProductUpdate(BaseModel):
    category_id: UUID
    title: str = Field(min_length=5, max_length=20)
    description: Optional[str] = Field(default=None, max_length=999)
    price: Decimal = Field(ge=0, max_digits=12, decimal_places=2)
    is_active: bool = True


class CategoryWrite(BaseModel):
    name: str = Field(min_length=1, max_length=50)


class ImageCreate(BaseModel):
    url: str = Field(min_length=1, max_length=2048)


class ProductResponse(BaseModel):
    id: UUID
    seller_id: UUID
    category_id: UUID
    title: str
    description: Optional[str] = None
    price: float
    is_active: bool

    @classmethod
    def from_product(cls, product: Product) -> 'ProductResponse':
        return cls(
            id=product.id,
            seller_id=product.seller_id,
            category_id=product.category_id,
            title=product.title,
            description=product.description,
            price=float(product.price),
            is_active=product.is_active
        )


class CategoryResponse(BaseModel):
    id: UUID
    name: str

    @classmethod
    def from_category(cls, category: Category) -> 'CategoryResponse':
        return cls(id=category.id, name=category.name)


class ImageResponse(BaseModel):
    id: UUID
    product_id: UUID
    url: str
    created_at: datetime

    @classmethod
    def from_image(cls, image: ProductImage) -> 'ImageResponse':
        return cls(
            id=image.id,
            product_id=image.product_id,
            url=image.url,
            created_at=image.created_at
        )
