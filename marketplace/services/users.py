from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.core.clock import now_micros
from marketplace.core.errors import NotFoundError, StorageError, ValidationError
from marketplace.models.user import User
from marketplace.schemas.pagination import UserFilter, with_page_defaults


def validate_name(name: str) -> None:
    if not name.strip():
        raise ValidationError("name is required")


def new_user(*, name: str) -> User:
    # the raw name is stored, not the trimmed one
    validate_name(name)

    now = now_micros()
    return User(name=name, created_at=now, updated_at=now)


# persistence

async def insert_user(db: AsyncSession, user: User) -> User:
    try:
        db.add(user)
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        raise StorageError(f"failed to insert user: {e}") from e
    return user


async def find_user(db: AsyncSession, user_id: int) -> User:
    try:
        user = (await db.execute(select(User).where(User.id == user_id))).scalar_one_or_none()
    except SQLAlchemyError as e:
        raise StorageError(f"failed to query user: {e}") from e

    if user is None:
        raise NotFoundError("user not found")
    return user


async def find_users(db: AsyncSession, filt: UserFilter) -> Sequence[User]:
    stmt = (
        select(User)
        .order_by(User.created_at.desc(), User.id.desc())
        .limit(filt.page_size)
        .offset(filt.offset)
    )
    try:
        return (await db.execute(stmt)).scalars().all()
    except SQLAlchemyError as e:
        raise StorageError(f"failed to query users: {e}") from e


# use cases

async def create_user(db: AsyncSession, *, name: str) -> User:
    return await insert_user(db, new_user(name=name))


async def get_user(db: AsyncSession, user_id: int) -> User:
    return await find_user(db, user_id)


async def get_users(db: AsyncSession, *, page_num: int, page_size: int) -> Sequence[User]:
    page_num, page_size = with_page_defaults(page_num, page_size)
    return await find_users(db, UserFilter(page_num=page_num, page_size=page_size))
