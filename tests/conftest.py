import os
import sys

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from tortoise import Tortoise

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)


@pytest_asyncio.fixture(scope="function")
async def db() -> None:
    """Lightweight in-memory DB per test."""
    await Tortoise.init(
        db_url="sqlite://:memory:",
        modules={"models": ["fruit_spinner.database.models"]},
    )
    await Tortoise.generate_schemas()
    yield
    await Tortoise.close_connections()


@pytest_asyncio.fixture
async def repo(db):
    from fruit_spinner.storage import UserRepository

    return UserRepository()


@pytest_asyncio.fixture
async def user(repo):
    """Create a test player with 100 points."""
    return await repo.create_user(
        "u1", telegram_name="Test", points=100, points_balance=100
    )


@pytest_asyncio.fixture
async def api_client(repo):
    """HTTP client bound to the app, without running its lifespan."""
    from fruit_spinner.interfaces.api.main import app

    app.state.points_gateway = repo
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as client:
        yield client
    app.dependency_overrides.clear()
