"""Shared fixtures: in-memory repositories and a mocked asyncpg pool."""

import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from api import create_app
from api.services import Services
from auth import AuthService, PasswordHasher, SessionManager
from auth.tokens import RefreshTokenRecord
from catalog import CategoryService, ImageService, ProductService
from catalog.models import Category, Product, ProductImage
from errors import DuplicateIdentity, IdentityNotFound, NotFound, TokenNotFound
from identity import Identity, Role

JWT_SECRET = "test-secret"


def _now() -> datetime:
    return datetime.now(timezone.utc)


class FakeIdentityRepository:
    """Dictionary backed identities with the repository's error contract."""

    def __init__(self):
        self.users: Dict[uuid.UUID, Identity] = {}
        self.profiles: Dict[uuid.UUID, Dict[str, Any]] = {}
        self.lookups = 0

    def _find(self, role: Role, field: str, value: str) -> Identity:
        self.lookups += 1
        for identity in self.users.values():
            if identity.user_type == role and getattr(identity, field) == value:
                return identity
        raise IdentityNotFound()

    async def get_by_username(self, role: Role, username: str) -> Identity:
        return self._find(role, 'username', username)

    async def get_by_email(self, role: Role, email: str) -> Identity:
        return self._find(role, 'email', email)

    async def get_by_id(self, user_id) -> Identity:
        self.lookups += 1
        identity = self.users.get(uuid.UUID(str(user_id)))
        if identity is None:
            raise IdentityNotFound()
        return identity

    async def create(self, role: Role, username: str, email: str, password_hash: str) -> Identity:
        for identity in self.users.values():
            if identity.user_type == role and (
                identity.username == username or identity.email == email
            ):
                raise DuplicateIdentity()
        now = _now()
        identity = Identity(
            id=uuid.uuid4(),
            user_type=role,
            username=username,
            email=email,
            password_hash=password_hash,
            created_at=now,
            updated_at=now
        )
        self.users[identity.id] = identity
        self.profiles[identity.id] = {}
        return identity

    async def update_credentials(self, user_id, email=None, username=None, password_hash=None) -> int:
        key = uuid.UUID(str(user_id))
        if key not in self.users:
            return 0
        changes = {'updated_at': _now()}
        if email is not None:
            changes['email'] = email
        if username is not None:
            changes['username'] = username
        if password_hash is not None:
            changes['password_hash'] = password_hash
        self.users[key] = self.users[key].model_copy(update=changes)
        return 1

    async def update_profile(self, user_id, role: Role, fields: Dict[str, Any]) -> int:
        key = uuid.UUID(str(user_id))
        if key not in self.profiles:
            return 0
        self.profiles[key].update(fields)
        self.users[key] = self.users[key].model_copy(update={'updated_at': _now()})
        return 1

    async def delete(self, user_id) -> None:
        key = uuid.UUID(str(user_id))
        if key not in self.users:
            raise IdentityNotFound()
        del self.users[key]
        self.profiles.pop(key, None)


class FakeTokenStore:

    def __init__(self):
        self.records: Dict[uuid.UUID, RefreshTokenRecord] = {}

    async def get(self, user_id) -> RefreshTokenRecord:
        record = self.records.get(uuid.UUID(str(user_id)))
        if record is None:
            raise TokenNotFound()
        return record

    async def upsert(self, record: RefreshTokenRecord) -> None:
        self.records[record.user_id] = record

    async def revoke(self, user_id) -> None:
        key = uuid.UUID(str(user_id))
        if key not in self.records:
            raise TokenNotFound()
        self.records[key] = self.records[key].model_copy(update={'is_revoked': True})


class FakeCategoryRepository:

    def __init__(self):
        self.categories: Dict[uuid.UUID, Category] = {}
        self.last_page = None

    async def create(self, name: str) -> Category:
        now = _now()
        category = Category(id=uuid.uuid4(), name=name, created_at=now, updated_at=now)
        self.categories[category.id] = category
        return category

    async def get_by_id(self, category_id) -> Optional[Category]:
        return self.categories.get(uuid.UUID(str(category_id)))

    async def update(self, category_id, name: str) -> int:
        key = uuid.UUID(str(category_id))
        if key not in self.categories:
            return 0
        self.categories[key] = self.categories[key].model_copy(update={'name': name})
        return 1

    async def delete(self, category_id) -> int:
        return 1 if self.categories.pop(uuid.UUID(str(category_id)), None) else 0

    async def list(self, limit: int, offset: int) -> List[Category]:
        self.last_page = (limit, offset)
        ordered = sorted(self.categories.values(), key=lambda c: c.name)
        return ordered[offset:offset + limit]


class FakeProductRepository:

    def __init__(self, categories: FakeCategoryRepository):
        self.category_repository = categories
        self.products: Dict[uuid.UUID, Product] = {}
        self.last_page = None

    async def create(self, seller_id, category_id, title, description, price) -> Product:
        if uuid.UUID(str(category_id)) not in self.category_repository.categories:
            raise NotFound("referenced record not found")
        now = _now()
        product = Product(
            id=uuid.uuid4(),
            seller_id=seller_id,
            category_id=category_id,
            title=title,
            description=description,
            price=price,
            is_active=True,
            created_at=now,
            updated_at=now
        )
        self.products[product.id] = product
        return product

    async def get_by_id(self, product_id) -> Optional[Product]:
        return self.products.get(uuid.UUID(str(product_id)))

    async def get_by_title(self, title: str) -> Optional[Product]:
        for product in self.products.values():
            if product.title == title:
                return product
        return None

    async def update(self, product_id, seller_id, fields: Dict[str, Any]) -> int:
        product = self.products.get(uuid.UUID(str(product_id)))
        if product is None or product.seller_id != seller_id:
            return 0
        self.products[product.id] = product.model_copy(update=fields)
        return 1

    async def delete(self, product_id, seller_id) -> int:
        product = self.products.get(uuid.UUID(str(product_id)))
        if product is None or product.seller_id != seller_id:
            return 0
        del self.products[product.id]
        return 1

    async def list(self, category_id, limit: int, offset: int) -> List[Product]:
        self.last_page = (limit, offset)
        matching = [
            p for p in self.products.values()
            if p.category_id == uuid.UUID(str(category_id))
        ]
        return matching[offset:offset + limit]


class FakeImageRepository:

    def __init__(self, products: FakeProductRepository):
        self.product_repository = products
        self.images: Dict[uuid.UUID, ProductImage] = {}
        self.last_page = None

    async def create(self, product_id, url: str) -> ProductImage:
        image = ProductImage(id=uuid.uuid4(), product_id=product_id, url=url, created_at=_now())
        self.images[image.id] = image
        return image

    async def get_by_id(self, image_id) -> Optional[ProductImage]:
        return self.images.get(uuid.UUID(str(image_id)))

    async def delete(self, image_id, seller_id) -> int:
        image = self.images.get(uuid.UUID(str(image_id)))
        if image is None:
            return 0
        product = self.product_repository.products.get(image.product_id)
        if product is None or product.seller_id != seller_id:
            return 0
        del self.images[image.id]
        return 1

    async def list_by_product(self, product_id, limit: int, offset: int) -> List[ProductImage]:
        self.last_page = (limit, offset)
        matching = [
            i for i in self.images.values()
            if i.product_id == uuid.UUID(str(product_id))
        ]
        return matching[offset:offset + limit]


@pytest.fixture
def identities():
    return FakeIdentityRepository()


@pytest.fixture
def token_store():
    return FakeTokenStore()


@pytest.fixture
def hasher():
    # Minimum bcrypt cost keeps the suite fast
    return PasswordHasher(rounds=4)


@pytest.fixture
def sessions(token_store):
    return SessionManager(token_store, JWT_SECRET)


@pytest.fixture
def auth_service(identities, sessions, hasher):
    return AuthService(identities, sessions, hasher)


@pytest.fixture
def category_repository():
    return FakeCategoryRepository()


@pytest.fixture
def product_repository(category_repository):
    return FakeProductRepository(category_repository)


@pytest.fixture
def image_repository(product_repository):
    return FakeImageRepository(product_repository)


@pytest.fixture
def services(auth_service, sessions, category_repository, product_repository, image_repository):
    return Services(
        auth=auth_service,
        sessions=sessions,
        products=ProductService(product_repository),
        categories=CategoryService(category_repository),
        images=ImageService(image_repository, product_repository)
    )


@pytest.fixture
def client(services):
    """Test client over fake services; the database lifespan is not entered."""
    return TestClient(create_app(services), raise_server_exceptions=False)


class FakePool:
    """Pool handing out a single mocked asyncpg connection."""

    def __init__(self):
        self.tx = MagicMock()
        self.tx.start = AsyncMock()
        self.tx.commit = AsyncMock()
        self.tx.rollback = AsyncMock()

        self.conn = MagicMock()
        self.conn.transaction.return_value = self.tx
        self.conn.execute = AsyncMock(return_value="CREATE TABLE")
        self.conn.fetchrow = AsyncMock(return_value=None)
        self.conn.fetch = AsyncMock(return_value=[])

    @asynccontextmanager
    async def acquire(self):
        yield self.conn


@pytest.fixture
def pool():
    return FakePool()
