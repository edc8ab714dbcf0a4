from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from marketplace.api.endpoints.listings import router as listings_router
from marketplace.api.endpoints.public import router as public_router
from marketplace.api.endpoints.users import router as users_router
from marketplace.core.config import (
    ListingServiceSettings,
    PublicApiSettings,
    ServiceSettings,
    UserServiceSettings,
)
from marketplace.core.db import Storage
from marketplace.core.errors import register_error_handlers
from marketplace.core.telemetry import instrument_engine, setup_telemetry
from marketplace.models.listing import Listing
from marketplace.models.user import User
from marketplace.services.aggregation import ListingAggregator
from marketplace.services.clients import ListingClient, UserClient


log = logging.getLogger(__name__)


def _log_start(settings: ServiceSettings) -> None:
    addr = f"{settings.host}:{settings.port}"
    if settings.debug:
        log.info("%s: starting in DEBUG mode on %s", settings.service_name, addr)
    else:
        log.info("%s: starting on %s", settings.service_name, addr)


def _storage_lifespan(settings: ListingServiceSettings | UserServiceSettings):
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        _log_start(settings)
        storage: Storage = app.state.storage
        await storage.open()
        instrument_engine(storage.engine, settings)
        try:
            yield
        finally:
            log.info("%s: shutting down", settings.service_name)
            await storage.close()

    return lifespan


def create_listing_app(settings: ListingServiceSettings | None = None) -> FastAPI:
    settings = settings or ListingServiceSettings()

    app = FastAPI(title="Listing Service", version="0.1.0", lifespan=_storage_lifespan(settings))
    app.state.settings = settings
    app.state.storage = Storage(settings.db_path, [Listing.__table__])

    register_error_handlers(app)
    setup_telemetry(app, settings)
    app.include_router(listings_router, tags=["listings"])
    return app


def create_user_app(settings: UserServiceSettings | None = None) -> FastAPI:
    settings = settings or UserServiceSettings()

    app = FastAPI(title="User Service", version="0.1.0", lifespan=_storage_lifespan(settings))
    app.state.settings = settings
    app.state.storage = Storage(settings.db_path, [User.__table__])

    register_error_handlers(app)
    setup_telemetry(app, settings)
    app.include_router(users_router, tags=["users"])
    return app


def create_public_app(
    settings: PublicApiSettings | None = None,
    *,
    listing_transport: httpx.AsyncBaseTransport | None = None,
    user_transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """
    Build the public API. The transports let callers route downstream calls
    somewhere other than the network (in-process apps, mocks).
    """
    settings = settings or PublicApiSettings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        _log_start(settings)
        log.info("public-api: listing service %s", settings.listing_service_url)
        log.info("public-api: user service %s", settings.user_service_url)
        try:
            yield
        finally:
            log.info("%s: shutting down", settings.service_name)
            await aggregator.listings.aclose()
            await aggregator.users.aclose()

    aggregator = ListingAggregator(
        ListingClient(settings.listing_service_url, transport=listing_transport),
        UserClient(settings.user_service_url, transport=user_transport),
        lookup_concurrency=settings.user_lookup_concurrency,
    )

    app = FastAPI(title="Public API", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.aggregator = aggregator

    register_error_handlers(app)
    setup_telemetry(app, settings)
    app.include_router(public_router, tags=["public"])
    return app
