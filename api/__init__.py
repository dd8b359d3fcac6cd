"""REST API module for the marketplace.

This module provides HTTP endpoints for:
- Registration, login and session management
- Customer and seller profile updates
- Categories, products and product images
- Health checks
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import get_settings_conf
from database import init_db, close as db_close
from .responses import register_exception_handlers
from .services import Services, build_services, install_services

logger = logging.getLogger(__name__)


# Lifecycle management
@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle startup and shutdown events."""
    logger.info("Initializing API...")

    # Services supplied to create_app are used as is
    owns_pool = getattr(app.state, 'services', None) is None
    if owns_pool:
        settings = get_settings_conf()
        pool = await init_db(settings['db'])
        install_services(app, build_services(pool, settings['jwt']))

    yield

    logger.info("Shutting down API...")
    if owns_pool:
        await db_close()


def create_app(services: Optional[Services] = None) -> FastAPI:
    """Create the FastAPI application.

    Args:
        services: Optional pre-built services. When omitted, the lifespan
            connects to the database and builds them from settings.
    """
    app = FastAPI(
        title="Marketplace API",
        description="REST API for the marketplace backend",
        version="1.0.0",
        lifespan=lifespan
    )

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    if services is not None:
        install_services(app, services)

    # Import and include all routers
    from .auth import router as auth_router
    from .categories import router as categories_router
    from .images import router as images_router
    from .products import router as products_router
    from .system import router as system_router

    app.include_router(auth_router)
    app.include_router(products_router)
    app.include_router(categories_router)
    app.include_router(images_router)
    app.include_router(system_router)

    return app


app = create_app()

__all__ = ['app', 'create_app']
