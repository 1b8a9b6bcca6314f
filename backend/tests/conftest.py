import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from joyeria.config import Config
from joyeria.main import app
from joyeria.db.database import db
from joyeria.time_utils import today

TEST_EMAIL = "vendedora@aivi.mx"
TEST_PASSWORD = "plata-925-segura"


@pytest.fixture(autouse=True)
def app_config(tmp_path, monkeypatch):
    """Fast hashing, local storage under tmp_path and no background sweep."""
    monkeypatch.setattr(Config, "BCRYPT_ROUNDS", 4)
    monkeypatch.setattr(Config, "STORAGE_ROOT", str(tmp_path / "storage"))
    monkeypatch.setattr(Config, "PUBLIC_BASE_URL", "http://test")
    monkeypatch.setattr(Config, "EXPIRY_SWEEP_INTERVAL_SECONDS", 0)


@pytest.fixture
async def database():
    """In-memory SQLite database with every table created."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await db.connect(engine)
    await db.create_all()
    yield db
    await db.disconnect()


@pytest.fixture
async def client(database):
    """Async test client bound to the in-memory database."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as ac:
        yield ac


@pytest.fixture
async def auth_headers(client):
    """Bearer headers of a freshly registered user."""
    response = await client.post(
        "/api/v1/auth/sign-up",
        json={"email": TEST_EMAIL, "password": TEST_PASSWORD, "name": "Vendedora"}
    )
    assert response.status_code == 201

    response = await client.post(
        "/api/v1/auth/sign-in",
        json={"email": TEST_EMAIL, "password": TEST_PASSWORD}
    )
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
def create_product(client, auth_headers):
    async def _create(**overrides):
        payload = {
            "name": "Anillo de plata 925",
            "purchase_price": 400,
            "sale_price": 900,
            "stock": 5,
            "category": "Anillos",
        }
        payload.update(overrides)
        response = await client.post("/api/v1/products", json=payload, headers=auth_headers)
        assert response.status_code == 201
        return response.json()

    return _create


@pytest.fixture
def create_sale(client, auth_headers, create_product):
    async def _create(unit_price=900, quantity=1, **product_overrides):
        product = await create_product(**product_overrides)
        response = await client.post(
            "/api/v1/sales",
            json={
                "product_id": product["id"],
                "quantity": quantity,
                "unit_price": unit_price,
                "customer": "María López",
            },
            headers=auth_headers,
        )
        assert response.status_code == 201
        return response.json()

    return _create


@pytest.fixture
def current_day():
    return today()
