import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from family_auth.api.app import create_app
from family_auth.app.services.credentials import hash_pin
from family_auth.app.services.device_auth_gate import (
    DEVICE_AUTH_COOKIE_NAME,
    DEVICE_AUTH_COOKIE_VALUE,
)
from tests.fixtures.settings import ACCESS_KEY, PARENT_PIN, TestConfig
from tests.utils.fakes import FakeIdentityProvider, FakeObjectStorage


@pytest_asyncio.fixture
def config():
    return TestConfig


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine("sqlite+aiosqlite:///./test.db")
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
def identity():
    provider = FakeIdentityProvider()
    provider.add_member("parent-1", "parent", pin_hash=hash_pin(PARENT_PIN), name="Alex")
    provider.add_member("kid-1", "child", name="Sam")
    return provider


@pytest_asyncio.fixture
def storage():
    return FakeObjectStorage()


@pytest_asyncio.fixture
async def app(engine, config, identity, storage):
    app = create_app(config)
    await app.state.engine.dispose()
    app.state.engine = engine
    app.state.session_factory = sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
    )
    app.state.identity_provider = identity
    app.state.object_storage = storage
    return app


@pytest_asyncio.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def device_client(app):
    """Browser that already carries the device cookie"""
    transport = ASGITransport(app=app)
    async with AsyncClient(
        transport=transport,
        base_url="http://test",
        cookies={DEVICE_AUTH_COOKIE_NAME: DEVICE_AUTH_COOKIE_VALUE},
    ) as ac:
        yield ac


@pytest_asyncio.fixture
async def mobile_token(client):
    response = await client.post(
        "/api/mobile/device-activate",
        json={"accessKey": ACCESS_KEY, "platform": "ios", "deviceName": "Kitchen iPad"},
    )
    assert response.status_code == 200
    return response.json()["deviceSessionToken"]
