"""Service wiring and FastAPI dependencies resolving services from app state."""
from typing import Any, Dict

from fastapi import FastAPI, Request

from auth import AuthService, PasswordHasher, SessionManager, TokenStore
from catalog import (
    CategoryRepository, CategoryService, ImageRepository, ImageService,
    ProductRepository, ProductService
)
from identity import IdentityRepository


class Services:
    """Holds the service instances shared by all requests."""

    def __init__(
        self,
        auth: AuthService,
        sessions: SessionManager,
        products: ProductService,
        categories: CategoryService,
        images: ImageService
    ):
        self.auth = auth
        self.sessions = sessions
        self.products = products
        self.categories = categories
        self.images = images


def build_services(pool, jwt_settings: Dict[str, Any]) -> Services:
    """Wire repositories and services over one connection pool.

    Args:
        pool: Database connection pool
        jwt_settings: The [jwt] settings section
    """
    sessions = SessionManager.from_settings(TokenStore(pool), jwt_settings)
    product_repository = ProductRepository(pool)

    return Services(
        auth=AuthService(IdentityRepository(pool), sessions, PasswordHasher()),
        sessions=sessions,
        products=ProductService(product_repository),
        categories=CategoryService(CategoryRepository(pool)),
        images=ImageService(ImageRepository(pool), product_repository)
    )


def install_services(app: FastAPI, services: Services) -> None:
    app.state.services = services
    app.state.sessions = services.sessions


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.services.auth


def get_product_service(request: Request) -> ProductService:
    return request.app.state.services.products


def get_category_service(request: Request) -> CategoryService:
    return request.app.state.services.categories


def get_image_service(request: Request) -> ImageService:
    return request.app.state.services.images
