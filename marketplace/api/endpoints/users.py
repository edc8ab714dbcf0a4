from fastapi import APIRouter, Depends, Form, Query
from fastapi.responses import PlainTextResponse
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.api.params import optional_int, parse_int
from marketplace.core.db import get_db
from marketplace.core.envelope import success_body
from marketplace.schemas.pagination import DEFAULT_PAGE_NUM, DEFAULT_PAGE_SIZE
from marketplace.schemas.user import UserOut
from marketplace.services.users import create_user, get_user, get_users

router = APIRouter()


# registered before /users/{user_id} so "ping" is not parsed as an id
@router.get("/users/ping", response_class=PlainTextResponse)
async def ping() -> str:
    return "pong!"


@router.post("/users")
async def create_user_endpoint(
    name: str = Form(""),
    db: AsyncSession = Depends(get_db),
) -> dict:
    user = await create_user(db, name=name)
    return success_body({"user": UserOut.model_validate(user).model_dump()})


@router.get("/users/{user_id}")
async def get_user_endpoint(user_id: str, db: AsyncSession = Depends(get_db)) -> dict:
    user = await get_user(db, parse_int(user_id, "invalid user id"))
    return success_body({"user": UserOut.model_validate(user).model_dump()})


@router.get("/users")
async def list_users_endpoint(
    page_num: str | None = Query(None),
    page_size: str | None = Query(None),
    db: AsyncSession = Depends(get_db),
) -> dict:
    # only malformed numbers are rejected here, the use case clamps the rest
    num = optional_int(page_num, "invalid page_num")
    size = optional_int(page_size, "invalid page_size")

    rows = await get_users(
        db,
        page_num=DEFAULT_PAGE_NUM if num is None else num,
        page_size=DEFAULT_PAGE_SIZE if size is None else size,
    )
    return success_body({"users": [UserOut.model_validate(r).model_dump() for r in rows]})
