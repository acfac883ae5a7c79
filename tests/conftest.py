import asyncio
import os
import uuid
from decimal import Decimal

# Settings are read at import time, so they must be in place before the app loads
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./unused-test.db")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

import main
from services.auth_service.main import auth_app
from services.order_service.main import order_app
from services.product_service.main import product_app
from services.product_service.models import Product
from shared.config.database import create_tables, get_db
from shared.security import Identity, create_access_token

SUB_APPS = (product_app, order_app, auth_app)


def _make_engine(tmp_path):
    # A file database so concurrent sessions really use separate connections
    return create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'retail.db'}", poolclass=NullPool)


def auth_headers(user_id: str, role: str = "user") -> dict:
    token = create_access_token({"sub": user_id, "role": role})
    return {"Authorization": f"Bearer {token}"}


# --- ASYNC (service level) ---

@pytest.fixture
async def engine(tmp_path):
    engine = _make_engine(tmp_path)
    await create_tables(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def make_product(session_factory):
    async def _make(**overrides) -> Product:
        fields = {
            "name": "Oud Wood",
            "description": "Smoky oud with cardamom",
            "price": Decimal("10.00"),
            "stock": 5,
            "category": "Unisex",
            "is_active": True,
        }
        fields.update(overrides)
        async with session_factory() as session:
            product = Product(id=str(uuid.uuid4()), **fields)
            session.add(product)
            await session.commit()
            return product

    return _make


@pytest.fixture
def read_stock(session_factory):
    async def _read(product_id: str) -> int:
        async with session_factory() as session:
            product = await session.get(Product, product_id)
            return product.stock

    return _read


@pytest.fixture
def customer():
    return Identity(id="user-1", role="user")


# --- HTTP (API level) ---

@pytest.fixture
def client(tmp_path):
    engine = _make_engine(tmp_path)
    asyncio.run(create_tables(engine))
    factory = async_sessionmaker(engine, expire_on_commit=False)

    async def override_get_db():
        async with factory() as session:
            yield session

    # Mounted apps resolve dependencies against their own overrides
    for sub_app in SUB_APPS:
        sub_app.dependency_overrides[get_db] = override_get_db

    yield TestClient(main.app)

    for sub_app in SUB_APPS:
        sub_app.dependency_overrides.clear()


@pytest.fixture
def headers_for():
    return auth_headers


@pytest.fixture
def admin_headers():
    return auth_headers("admin-1", role="admin")


@pytest.fixture
def user_headers():
    return auth_headers("user-1")


@pytest.fixture
def other_user_headers():
    return auth_headers("user-2")


@pytest.fixture
def create_product(client, admin_headers):
    def _create(**overrides) -> dict:
        payload = {
            "name": "Oud Wood",
            "description": "Smoky oud with cardamom",
            "price": "10.00",
            "stock": 5,
            "category": "Unisex",
        }
        payload.update(overrides)
        response = client.post("/products/", json=payload, headers=admin_headers)
        assert response.status_code == 201, response.text
        return response.json()

    return _create
