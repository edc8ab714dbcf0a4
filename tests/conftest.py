import httpx
import pytest_asyncio

from marketplace.core.config import ListingServiceSettings, PublicApiSettings, UserServiceSettings
from marketplace.main import create_listing_app, create_public_app, create_user_app


LISTING_URL = "http://listing-service"
USER_URL = "http://user-service"


@pytest_asyncio.fixture
async def listing_app(tmp_path):
    """
    Listing service backed by a throwaway sqlite file.
    ASGITransport does not run the lifespan, so storage is opened here.
    """
    app = create_listing_app(ListingServiceSettings(db_path=str(tmp_path / "listings.db")))
    await app.state.storage.open()
    try:
        yield app
    finally:
        await app.state.storage.close()


@pytest_asyncio.fixture
async def user_app(tmp_path):
    app = create_user_app(UserServiceSettings(db_path=str(tmp_path / "users.db")))
    await app.state.storage.open()
    try:
        yield app
    finally:
        await app.state.storage.close()


@pytest_asyncio.fixture
async def listing_client(listing_app):
    transport = httpx.ASGITransport(app=listing_app)
    async with httpx.AsyncClient(transport=transport, base_url=LISTING_URL) as ac:
        yield ac


@pytest_asyncio.fixture
async def user_client(user_app):
    transport = httpx.ASGITransport(app=user_app)
    async with httpx.AsyncClient(transport=transport, base_url=USER_URL) as ac:
        yield ac


def public_settings(**overrides) -> PublicApiSettings:
    return PublicApiSettings(listing_service_url=LISTING_URL, user_service_url=USER_URL, **overrides)


@pytest_asyncio.fixture
async def make_public_client():
    """
    Factory for a public API client whose downstream calls go through the
    given transports. Everything opened is closed at teardown.
    """
    opened = []

    def _make(listing_transport, user_transport, **settings_overrides):
        app = create_public_app(
            public_settings(**settings_overrides),
            listing_transport=listing_transport,
            user_transport=user_transport,
        )
        ac = httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test")
        opened.append((app, ac))
        return ac

    yield _make

    for app, ac in opened:
        await ac.aclose()
        await app.state.aggregator.listings.aclose()
        await app.state.aggregator.users.aclose()


@pytest_asyncio.fixture
async def public_client(listing_app, user_app, make_public_client):
    """Public API wired in-process to the real listing and user services."""
    return make_public_client(httpx.ASGITransport(app=listing_app), httpx.ASGITransport(app=user_app))
