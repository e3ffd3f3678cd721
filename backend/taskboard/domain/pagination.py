"""Page requests and paginated results."""

import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

T = TypeVar("T")

# Largest row offset a signed 64-bit database integer can carry
MAX_OFFSET = 2**63 - 1


@dataclass(frozen=True)
class PageRequest:
    per_page: int
    page: int = 1

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.per_page


@dataclass
class Page(Generic[T]):
    items: list[T]
    total: int
    per_page: int
    current_page: int
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def last_page(self) -> int:
        return max(1, math.ceil(self.total / self.per_page))


def positive_int(value: Any) -> int | None:
    """Parse a strictly positive integer, returning None for anything else."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = int(str(value).strip())
    except ValueError:
        return None
    return number if number > 0 else None


def parse_page_request(
    params: Mapping[str, Any],
    *,
    max_per_page: int,
    default_per_page: int | None = None,
) -> PageRequest | None:
    """Build a PageRequest from ``per_page`` / ``page`` parameters.

    Returns None when no usable page size is given and there is no default,
    meaning "do not paginate". Page size is clamped to ``max_per_page``;
    an invalid page number falls back to 1.
    """
    per_page = positive_int(params.get("per_page")) or default_per_page
    if per_page is None:
        return None
    per_page = min(per_page, max_per_page)
    page = positive_int(params.get("page")) or 1
    # Far-out pages are simply empty; keep the offset representable
    page = min(page, MAX_OFFSET // per_page + 1)
    return PageRequest(per_page=per_page, page=page)


def paginate(items: list[T], request: PageRequest) -> Page[T]:
    """Slice an already-ordered list into a Page."""
    start = request.offset
    return Page(
        items=items[start:start + request.per_page],
        total=len(items),
        per_page=request.per_page,
        current_page=request.page,
    )
