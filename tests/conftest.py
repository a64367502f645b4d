import os
import time
from typing import AsyncGenerator

import jwt
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from mongomock_motor import AsyncMongoMockClient

# Test configuration, applied before the app reads its settings
os.environ.setdefault("MONGODB_DB_NAME", "canvix_test")
os.environ.setdefault("SECRET_KEY", "test-secret-key-min-32-characters-long")
os.environ.setdefault("PIXLR_API_KEY", "pixlr-test-key")
os.environ.setdefault("PIXLR_API_SECRET", "pixlr-test-secret-min-32-characters-long")
os.environ["MONGODB_TRANSACTIONS"] = "false"
os.environ["CLERK_JWT_KEY"] = ""

CLERK_TEST_SECRET = "clerk-test-secret-min-32-characters-long"


@pytest_asyncio.fixture
async def db():
    """Fresh in-memory database with all document models bound."""
    from app.db.init import init_db
    database = AsyncMongoMockClient()["canvix_test"]
    await init_db(database)
    yield database


@pytest_asyncio.fixture
async def client(db) -> AsyncGenerator[AsyncClient, None]:
    from app.main import app
    async with AsyncClient(
        transport=ASGITransport(app=app, raise_app_exceptions=False),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest.fixture
def identity_token(monkeypatch):
    """Configure an HS256 identity provider and return a token factory."""
    from app.core.config import get_settings
    settings = get_settings()
    monkeypatch.setattr(settings, "clerk_jwt_key", CLERK_TEST_SECRET)
    monkeypatch.setattr(settings, "clerk_jwt_algorithm", "HS256")

    def make(sub: str, expires_in: int = 3600, **claims) -> str:
        payload = {"sub": sub, "exp": int(time.time()) + expires_in, **claims}
        return jwt.encode(payload, CLERK_TEST_SECRET, algorithm="HS256")

    return make
