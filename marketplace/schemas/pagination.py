from __future__ import annotations

from dataclasses import dataclass


DEFAULT_PAGE_NUM = 1
DEFAULT_PAGE_SIZE = 10


@dataclass(frozen=True)
class PageFilter:
    page_num: int = DEFAULT_PAGE_NUM
    page_size: int = DEFAULT_PAGE_SIZE

    @property
    def offset(self) -> int:
        return (self.page_num - 1) * self.page_size


@dataclass(frozen=True)
class ListingFilter(PageFilter):
    user_id: int | None = None


@dataclass(frozen=True)
class UserFilter(PageFilter):
    pass


def with_page_defaults(page_num: int, page_size: int) -> tuple[int, int]:
    """Substitute defaults for non-positive page arguments."""
    if page_num < 1:
        page_num = DEFAULT_PAGE_NUM
    if page_size < 1:
        page_size = DEFAULT_PAGE_SIZE
    return page_num, page_size
