import os

# Must be set before config is imported
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("PASSWORD_HASH_ITERATIONS", "1000")

import httpx
import pytest
import pytest_asyncio

from config import init_db
from main import create_app


@pytest_asyncio.fixture
async def app(tmp_path):
    """Application wired to a fresh SQLite file per test."""
    database_url = f"sqlite+aiosqlite:///{(tmp_path / 'localharvest.db').as_posix()}"
    application = create_app(database_url, create_tables=False)
    await init_db(application.state.engine)
    yield application
    await application.state.engine.dispose()


@pytest_asyncio.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest_asyncio.fixture
async def db_session(app):
    async with app.state.sessionmaker() as session:
        yield session


def auth(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def register(client):
    """Register an account and return (token, user)."""
    counter = {"n": 0}

    async def _register(role, location=(0.0, 0.0), community_name=None, name=None, email=None, password="secret123"):
        counter["n"] += 1
        payload = {
            "name": name or f"{role} {counter['n']}",
            "email": email or f"{role.lower()}{counter['n']}@example.com",
            "password": password,
            "role": role,
            "phone_number": f"+1555000{counter['n']:04d}",
            "location": {"type": "Point", "coordinates": list(location)},
        }
        if community_name is not None:
            payload["community_name"] = community_name
        resp = await client.post("/auth/register", json=payload)
        assert resp.status_code == 201, resp.text
        body = resp.json()
        return body["access_token"], body["user"]

    return _register


@pytest.fixture
def create_produce(client):
    async def _create(token, name="Tomatoes", quantity=50, price=2.5, unit="kg", image_url=None):
        payload = {"name": name, "quantity": quantity, "price": price, "unit": unit}
        if image_url:
            payload["imageURL"] = image_url
        resp = await client.post("/farmer/create", json=payload, headers=auth(token))
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _create
