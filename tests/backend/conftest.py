import os
import uuid
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from tortoise import Tortoise

from app.core import db as db_module
from app.core.codes import random_code
from app.core.security import hash_password
from app.main import app
from app.models.user import User


TEST_DB_URL = "sqlite://:memory:"
os.environ["DATABASE_URL"] = TEST_DB_URL
db_module.DB_URL = TEST_DB_URL
db_module.TORTOISE_ORM["connections"]["default"] = TEST_DB_URL


async def _init_test_db() -> None:
    """
    Initialize a clean in-memory SQLite database for every test.
    Ensures tables are recreated from scratch.
    """
    if Tortoise._inited:
        await Tortoise.close_connections()
    await Tortoise.init(config=db_module.TORTOISE_ORM)
    await Tortoise.generate_schemas()


@pytest_asyncio.fixture
async def db():
    """
    Fresh database for service-level tests that don't need HTTP.
    """
    await _init_test_db()
    yield
    await Tortoise.close_connections()


@pytest_asyncio.fixture
async def client(db):
    """
    Provide an HTTPX AsyncClient bound to the FastAPI app with a fresh DB.
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as async_client:
        yield async_client


@pytest.fixture(autouse=True)
def sent_emails(monkeypatch):
    """
    Replace the mailer for every test; the mock records (to, link) calls.
    """
    mock = AsyncMock(return_value=True)
    monkeypatch.setattr("app.services.users.send_confirmation_email", mock)
    return mock


@pytest_asyncio.fixture
async def create_user(db):
    """
    Factory fixture to create users directly via ORM (confirmed by default).
    """

    async def _create_user(password: str = "UserPass!23", confirmed: bool = True, **extra) -> tuple[User, str]:
        user = await User.create(
            username=extra.pop("username", f"user_{uuid.uuid4().hex[:6]}"),
            email=extra.pop("email", f"{uuid.uuid4().hex[:8]}@example.com"),
            password_hash=hash_password(password),
            user_code=random_code(),
            confirmed=confirmed,
            **extra,
        )
        return user, password

    return _create_user


@pytest_asyncio.fixture
async def auth_header_factory(client):
    """
    Helper fixture to obtain Authorization headers via the login endpoint.
    """

    async def _get_headers(email: str, password: str) -> dict[str, str]:
        resp = await client.post(
            "/api/v1/users/session",
            json={"email": email, "password": password},
        )
        assert resp.status_code == 200, resp.text
        token = resp.json()["data"]["accessToken"]
        return {"Authorization": f"Bearer {token}"}

    return _get_headers


@pytest_asyncio.fixture
async def logged_in(create_user, auth_header_factory):
    """
    Create a confirmed user and return (user, headers).
    """

    async def _logged_in(**kwargs) -> tuple[User, dict[str, str]]:
        user, password = await create_user(**kwargs)
        headers = await auth_header_factory(user.email, password)
        return user, headers

    return _logged_in
