from __future__ import annotations

import logging

import httpx
from pydantic import TypeAdapter

from marketplace.schemas.listing import ListingOut
from marketplace.schemas.user import UserOut
from marketplace.services.envelope import expect_many, expect_one
from marketplace.services.http_client import ServiceHttpClient


log = logging.getLogger(__name__)

_listing = TypeAdapter(ListingOut)
_listings = TypeAdapter(list[ListingOut])
_user = TypeAdapter(UserOut)


class ListingClient:
    service = "listing service"

    def __init__(self, base_url: str, *, transport: httpx.AsyncBaseTransport | None = None):
        self._http = ServiceHttpClient(base_url=base_url, transport=transport)

    async def aclose(self) -> None:
        await self._http.aclose()

    async def get_listings(self, *, page_num: int, page_size: int, user_id: int | None = None) -> list[ListingOut]:
        params = {"page_num": str(page_num), "page_size": str(page_size)}
        if user_id is not None:
            params["user_id"] = str(user_id)

        res = await self._http.get("/listings", params=params)
        log.debug("GET /listings %s -> %s (%s ms)", params, res.status_code, res.elapsed_ms)
        return expect_many(self.service, res, "listings", _listings)

    async def create_listing(self, *, user_id: int, listing_type: str, price: int) -> ListingOut:
        form = {"user_id": str(user_id), "listing_type": listing_type, "price": str(price)}
        res = await self._http.post_form("/listings", form=form)
        log.debug("POST /listings -> %s (%s ms)", res.status_code, res.elapsed_ms)
        return expect_one(self.service, res, "listing", _listing)


class UserClient:
    service = "user service"

    def __init__(self, base_url: str, *, transport: httpx.AsyncBaseTransport | None = None):
        self._http = ServiceHttpClient(base_url=base_url, transport=transport)

    async def aclose(self) -> None:
        await self._http.aclose()

    async def get_user(self, user_id: int) -> UserOut:
        res = await self._http.get(f"/users/{user_id}")
        log.debug("GET /users/%s -> %s (%s ms)", user_id, res.status_code, res.elapsed_ms)
        return expect_one(self.service, res, "user", _user)

    async def create_user(self, *, name: str) -> UserOut:
        res = await self._http.post_form("/users", form={"name": name})
        log.debug("POST /users -> %s (%s ms)", res.status_code, res.elapsed_ms)
        return expect_one(self.service, res, "user", _user)
