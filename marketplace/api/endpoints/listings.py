from fastapi import APIRouter, Depends, Form, Query
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.api.params import optional_int, positive_int, required_int
from marketplace.core.db import get_db
from marketplace.core.envelope import success_body
from marketplace.core.errors import ValidationError
from marketplace.schemas.listing import ListingOut
from marketplace.schemas.pagination import DEFAULT_PAGE_NUM, DEFAULT_PAGE_SIZE
from marketplace.services.listings import create_listing, get_listings

router = APIRouter()


@router.post("/listings")
async def create_listing_endpoint(
    user_id: str | None = Form(None),
    listing_type: str | None = Form(None),
    price: str | None = Form(None),
    db: AsyncSession = Depends(get_db),
) -> dict:
    owner_id = required_int(user_id, "user_id")
    if not listing_type:
        raise ValidationError("listing_type is required")
    amount = required_int(price, "price")

    listing = await create_listing(db, user_id=owner_id, listing_type=listing_type, price=amount)
    return success_body({"listing": ListingOut.model_validate(listing).model_dump()})


@router.get("/listings")
async def list_listings_endpoint(
    user_id: str | None = Query(None),
    page_num: str | None = Query(None),
    page_size: str | None = Query(None),
    db: AsyncSession = Depends(get_db),
) -> dict:
    # this handler rejects non-positive pages instead of defaulting them
    owner_id = optional_int(user_id, "user_id must be a valid integer")
    num = positive_int(page_num, "page_num", DEFAULT_PAGE_NUM)
    size = positive_int(page_size, "page_size", DEFAULT_PAGE_SIZE)

    rows = await get_listings(db, user_id=owner_id, page_num=num, page_size=size)
    return success_body({"listings": [ListingOut.model_validate(r).model_dump() for r in rows]})


@router.get("/listings/ping")
async def ping() -> dict:
    return success_body({"status": "ok"})
