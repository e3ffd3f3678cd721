"""Shared response shapes: messages, errors and paginated collections."""

from collections.abc import Callable
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field
from starlette.datastructures import URL

from taskboard.domain.pagination import Page

ItemT = TypeVar("ItemT")


class MessageResponse(BaseModel):
    message: str


class ErrorResponse(BaseModel):
    """Body of every error response. ``errors`` is present only for validation failures."""

    message: str
    errors: dict[str, list[str]] | None = None


class PageMeta(BaseModel):
    total: int
    per_page: int
    current_page: int
    last_page: int


class PageLinks(BaseModel):
    first: str
    last: str
    prev: str | None = None
    next: str | None = None


class Collection(BaseModel, Generic[ItemT]):
    data: list[ItemT] = Field(default_factory=list)


class Paginated(BaseModel, Generic[ItemT]):
    data: list[ItemT] = Field(default_factory=list)
    meta: PageMeta
    links: PageLinks


def page_links(url: URL, page: Page[Any]) -> PageLinks:
    """Build first/last/prev/next links by rewriting the ``page`` query parameter."""

    def link(number: int) -> str:
        return str(url.include_query_params(page=number, per_page=page.per_page))

    last = page.last_page
    return PageLinks(
        first=link(1),
        last=link(last),
        prev=link(page.current_page - 1) if page.current_page > 1 else None,
        next=link(page.current_page + 1) if page.current_page < last else None,
    )


def paginated(page: Page[Any], render: Callable[[Any], ItemT], url: URL) -> Paginated[ItemT]:
    return Paginated(
        data=[render(item) for item in page.items],
        meta=PageMeta(
            total=page.total,
            per_page=page.per_page,
            current_page=page.current_page,
            last_page=page.last_page,
        ),
        links=page_links(url, page),
    )
