from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.core.clock import now_micros
from marketplace.core.errors import StorageError, ValidationError
from marketplace.models.listing import Listing
from marketplace.schemas.pagination import ListingFilter, with_page_defaults


LISTING_TYPE_RENT = "rent"
LISTING_TYPE_SALE = "sale"
LISTING_TYPES = (LISTING_TYPE_RENT, LISTING_TYPE_SALE)


def validate_listing_type(listing_type: str) -> None:
    if listing_type not in LISTING_TYPES:
        raise ValidationError("listing_type must be either 'rent' or 'sale'")


def validate_price(price: int) -> None:
    if price <= 0:
        raise ValidationError("price must be greater than 0")


def new_listing(*, user_id: int, listing_type: str, price: int) -> Listing:
    """
    Build a validated, not yet persisted Listing.
    Type is checked before price; the first failure is raised.
    """
    validate_listing_type(listing_type)
    validate_price(price)

    now = now_micros()
    return Listing(
        user_id=user_id,
        listing_type=listing_type,
        price=price,
        created_at=now,
        updated_at=now,
    )


# persistence

async def insert_listing(db: AsyncSession, listing: Listing) -> Listing:
    try:
        db.add(listing)
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        raise StorageError(f"failed to create listing: {e}") from e
    return listing


async def find_listings(db: AsyncSession, filt: ListingFilter) -> Sequence[Listing]:
    # No re-validation here: callers hand in sane page values
    stmt = select(Listing)
    if filt.user_id is not None:
        stmt = stmt.where(Listing.user_id == filt.user_id)
    stmt = stmt.order_by(Listing.id.desc()).limit(filt.page_size).offset(filt.offset)

    try:
        return (await db.execute(stmt)).scalars().all()
    except SQLAlchemyError as e:
        raise StorageError(f"failed to query listings: {e}") from e


# use cases

async def create_listing(db: AsyncSession, *, user_id: int, listing_type: str, price: int) -> Listing:
    listing = new_listing(user_id=user_id, listing_type=listing_type, price=price)
    return await insert_listing(db, listing)


async def get_listings(
    db: AsyncSession,
    *,
    user_id: int | None,
    page_num: int,
    page_size: int,
) -> Sequence[Listing]:
    page_num, page_size = with_page_defaults(page_num, page_size)
    return await find_listings(db, ListingFilter(user_id=user_id, page_num=page_num, page_size=page_size))
