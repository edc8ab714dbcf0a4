import asyncio

import pytest

from marketplace.core.errors import UpstreamError
from marketplace.schemas.listing import ListingOut
from marketplace.schemas.user import UserOut
from marketplace.services.aggregation import ListingAggregator


def _listing(listing_id, user_id):
    return ListingOut(id=listing_id, user_id=user_id, listing_type="rent", price=10, created_at=1, updated_at=1)


class FakeListings:
    def __init__(self, page):
        self.page = page
        self.calls = []

    async def get_listings(self, *, page_num, page_size, user_id=None):
        self.calls.append((page_num, page_size, user_id))
        return self.page


class FakeUsers:
    """Owners answer in reverse order of request; ids in `missing` fail."""

    def __init__(self, missing=()):
        self.missing = set(missing)
        self.started = []
        self.finished = []
        self.in_flight = 0
        self.peak = 0

    async def get_user(self, user_id):
        self.started.append(user_id)
        self.in_flight += 1
        self.peak = max(self.peak, self.in_flight)
        try:
            await asyncio.sleep(0.01 * (10 - user_id))
            if user_id in self.missing:
                raise UpstreamError("user service error: user not found", upstream_status=404, from_envelope=True)
            self.finished.append(user_id)
            return UserOut(id=user_id, name=f"user-{user_id}", created_at=1, updated_at=1)
        finally:
            self.in_flight -= 1


@pytest.mark.asyncio
async def test_enrichment_keeps_listing_order_under_concurrency():
    listings = FakeListings([_listing(9, 1), _listing(8, 2), _listing(7, 3), _listing(6, 1)])
    users = FakeUsers()
    agg = ListingAggregator(listings, users, lookup_concurrency=2)

    out = await agg.get_listings(page_num=3, page_size=4, user_id=None)

    assert [item.id for item in out] == [9, 8, 7, 6]
    assert [item.user.id for item in out] == [1, 2, 3, 1]
    assert users.peak == 2
    assert listings.calls == [(3, 4, None)]


@pytest.mark.asyncio
async def test_sequential_lookups():
    users = FakeUsers()
    agg = ListingAggregator(FakeListings([_listing(2, 5), _listing(1, 4)]), users, lookup_concurrency=1)

    out = await agg.get_listings(page_num=1, page_size=10)

    assert [item.user.name for item in out] == ["user-5", "user-4"]
    assert users.peak == 1
    assert users.started == [5, 4]


@pytest.mark.asyncio
async def test_first_failure_aborts_remaining_lookups():
    # user 9 fails fastest; 1 and 2 are still sleeping when it does
    users = FakeUsers(missing={9})
    agg = ListingAggregator(FakeListings([_listing(3, 1), _listing(2, 2), _listing(1, 9)]), users, lookup_concurrency=3)

    with pytest.raises(UpstreamError) as exc:
        await agg.get_listings(page_num=1, page_size=10)

    assert exc.value.messages == ["failed to get user data: user service error: user not found"]
    assert users.finished == []
    assert users.in_flight == 0


@pytest.mark.asyncio
async def test_sequential_failure_stops_at_first_bad_owner():
    users = FakeUsers(missing={2})
    agg = ListingAggregator(FakeListings([_listing(3, 1), _listing(2, 2), _listing(1, 3)]), users, lookup_concurrency=1)

    with pytest.raises(UpstreamError):
        await agg.get_listings(page_num=1, page_size=10)

    assert users.started == [1, 2]


@pytest.mark.asyncio
async def test_empty_page_skips_user_lookups():
    users = FakeUsers()
    agg = ListingAggregator(FakeListings([]), users, lookup_concurrency=4)

    assert await agg.get_listings(page_num=1, page_size=10, user_id=7) == []
    assert users.started == []
