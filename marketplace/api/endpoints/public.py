from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import PlainTextResponse

from marketplace.api.params import optional_int
from marketplace.core.envelope import success_body
from marketplace.schemas.pagination import DEFAULT_PAGE_NUM, DEFAULT_PAGE_SIZE
from marketplace.schemas.public import CreateListingRequest, CreateUserRequest, PublicListingsOut
from marketplace.services.aggregation import ListingAggregator

router = APIRouter(prefix="/public-api")


def get_aggregator(request: Request) -> ListingAggregator:
    return request.app.state.aggregator


@router.get("/ping", response_class=PlainTextResponse)
async def ping() -> str:
    return "pong!"


@router.get("/listings")
async def list_listings(
    page_num: str | None = Query(None),
    page_size: str | None = Query(None),
    user_id: str | None = Query(None),
    aggregator: ListingAggregator = Depends(get_aggregator),
) -> dict:
    # malformed numbers are rejected, everything else is forwarded verbatim
    num = optional_int(page_num, "invalid page_num")
    size = optional_int(page_size, "invalid page_size")
    owner_id = optional_int(user_id, "invalid user_id")

    listings = await aggregator.get_listings(
        page_num=DEFAULT_PAGE_NUM if num is None else num,
        page_size=DEFAULT_PAGE_SIZE if size is None else size,
        user_id=owner_id,
    )
    return PublicListingsOut(listings=listings).model_dump()


@router.post("/listings")
async def create_listing(
    payload: CreateListingRequest,
    aggregator: ListingAggregator = Depends(get_aggregator),
) -> dict:
    listing = await aggregator.create_listing(
        user_id=payload.user_id,
        listing_type=payload.listing_type,
        price=payload.price,
    )
    return success_body({"listing": listing.model_dump()})


@router.post("/users")
async def create_user(
    payload: CreateUserRequest,
    aggregator: ListingAggregator = Depends(get_aggregator),
) -> dict:
    user = await aggregator.create_user(name=payload.name)
    return success_body({"user": user.model_dump()})
