from __future__ import annotations

import asyncio
import logging

from marketplace.core.errors import UpstreamError, ValidationError
from marketplace.schemas.listing import ListingOut
from marketplace.schemas.public import EnrichedListing
from marketplace.schemas.user import UserOut
from marketplace.services.clients import ListingClient, UserClient


log = logging.getLogger(__name__)


def enrich(listing: ListingOut, user: UserOut) -> EnrichedListing:
    return EnrichedListing(
        id=listing.id,
        listing_type=listing.listing_type,
        price=listing.price,
        created_at=listing.created_at,
        updated_at=listing.updated_at,
        user=user,
    )


class ListingAggregator:
    """
    Composes the Listing and User services for the public API.

    Enrichment is fail-fast: one failed owner lookup aborts the whole page,
    nothing partial is ever returned. Lookups run at most
    `lookup_concurrency` at a time and results keep the listing order.
    """

    def __init__(self, listings: ListingClient, users: UserClient, *, lookup_concurrency: int = 1):
        self.listings = listings
        self.users = users
        self._lookup_concurrency = max(1, lookup_concurrency)

    async def get_listings(self, *, page_num: int, page_size: int, user_id: int | None = None) -> list[EnrichedListing]:
        # pagination and owner filter are forwarded verbatim
        page = await self.listings.get_listings(page_num=page_num, page_size=page_size, user_id=user_id)
        if not page:
            return []

        owners = await self._lookup_owners([item.user_id for item in page])
        return [enrich(item, owner) for item, owner in zip(page, owners)]

    async def _lookup_owners(self, user_ids: list[int]) -> list[UserOut]:
        if self._lookup_concurrency == 1:
            owners = []
            for user_id in user_ids:
                owners.append(await self._lookup_owner(user_id))
            return owners

        sem = asyncio.Semaphore(self._lookup_concurrency)

        async def bounded(user_id: int) -> UserOut:
            async with sem:
                return await self._lookup_owner(user_id)

        tasks = [asyncio.create_task(bounded(user_id)) for user_id in user_ids]
        try:
            return list(await asyncio.gather(*tasks))
        except BaseException:
            # first failure wins, drop the lookups still in flight
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

    async def _lookup_owner(self, user_id: int) -> UserOut:
        try:
            return await self.users.get_user(user_id)
        except UpstreamError as e:
            log.warning("enrichment: owner %s lookup failed: %s", user_id, e)
            raise UpstreamError(
                *(f"failed to get user data: {m}" for m in e.messages),
                upstream_status=e.upstream_status,
            ) from e

    async def create_listing(self, *, user_id: int, listing_type: str, price: int) -> ListingOut:
        try:
            return await self.listings.create_listing(user_id=user_id, listing_type=listing_type, price=price)
        except UpstreamError as e:
            # the owning service is the validation authority, its 400s pass through untouched
            if e.is_validation:
                raise ValidationError(*e.upstream_errors) from e
            raise

    async def create_user(self, *, name: str) -> UserOut:
        try:
            return await self.users.create_user(name=name)
        except UpstreamError as e:
            # the owning service is the validation authority, its 400s pass through untouched
            if e.is_validation:
                raise ValidationError(*e.upstream_errors) from e
            raise

