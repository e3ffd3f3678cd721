"""Task listing query: filter, sort and pagination options.

``build_task_query`` turns raw request parameters into a ``TaskQuery``.
Stores evaluate the query either in memory (``matches`` / ``sort_key``) or by
translating the same fields into SQL; both must agree on these rules:

- filters compose with AND; an absent option imposes no constraint
- ``priority`` is an exact, case-sensitive match
- ``done`` / ``is_done`` accept loose truthy strings ("true", "1", "yes", "on")
- ``due_date`` compares the calendar day only; an unparsable value matches nothing
- with no ``sort_by`` the order is newest first by ``created_at``
- ``priority`` sorts by rank (low < medium < high, unknown first)
- ties break on ``id`` in the same direction as the primary sort
"""

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date, datetime
from enum import StrEnum
from typing import Any

from taskboard.domain.entities import Task, priority_rank
from taskboard.domain.pagination import PageRequest, parse_page_request


class Direction(StrEnum):
    ASC = "asc"
    DESC = "desc"


DEFAULT_SORT_FIELD = "created_at"

SORTABLE_FIELDS = frozenset({"id", "title", "is_done", "priority", "due_date", "created_at", "updated_at"})

# Wire names accepted for the same canonical attribute
FIELD_ALIASES = {"done": "is_done"}

TRUTHY_VALUES = frozenset({"1", "true", "yes", "on"})


def parse_loose_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in TRUTHY_VALUES


def parse_calendar_day(value: Any) -> date | None:
    """Parse a date or datetime string down to its calendar day."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        return None


@dataclass(frozen=True)
class TaskQuery:
    priority: str | None = None
    is_done: bool | None = None
    due_date: date | None = None
    # Set when a due_date filter was supplied but could not be parsed
    due_date_invalid: bool = False
    sort_by: str = DEFAULT_SORT_FIELD
    direction: Direction = Direction.DESC
    page: PageRequest | None = None

    @property
    def descending(self) -> bool:
        return self.direction == Direction.DESC

    @property
    def matches_nothing(self) -> bool:
        return self.due_date_invalid

    def matches(self, task: Task) -> bool:
        if self.matches_nothing:
            return False
        if self.priority is not None and task.priority != self.priority:
            return False
        if self.is_done is not None and task.is_done != self.is_done:
            return False
        if self.due_date is not None and task.due_date != self.due_date:
            return False
        return True

    def sort_key(self, task: Task) -> tuple:
        """Key for ``sorted(..., reverse=self.descending)``.

        Missing values sort first ascending and last descending.
        """
        if self.sort_by == "priority":
            primary: tuple = (1, priority_rank(task.priority))
        else:
            value = getattr(task, self.sort_by)
            primary = (0,) if value is None else (1, value)
        return (primary, task.id)

    def apply(self, tasks: list[Task]) -> list[Task]:
        """Filter and order an in-memory list of tasks."""
        selected = [task for task in tasks if self.matches(task)]
        return sorted(selected, key=self.sort_key, reverse=self.descending)


def _first_present(params: Mapping[str, Any], *names: str) -> tuple[bool, Any]:
    for name in names:
        if name in params and params[name] is not None:
            return True, params[name]
    return False, None


def build_task_query(params: Mapping[str, Any], *, max_per_page: int = 100) -> TaskQuery:
    """Build a TaskQuery from recognized request options.

    Unrecognized options are ignored. Malformed values never raise.
    """
    priority = params.get("priority")

    has_done, done_value = _first_present(params, "is_done", "done")
    is_done = parse_loose_bool(done_value) if has_done else None

    due_date = None
    due_date_invalid = False
    if params.get("due_date") is not None:
        due_date = parse_calendar_day(params["due_date"])
        due_date_invalid = due_date is None

    raw_sort = params.get("sort_by")
    sort_by = FIELD_ALIASES.get(raw_sort, raw_sort) if raw_sort else None
    if sort_by in SORTABLE_FIELDS:
        raw_direction = str(params.get("direction") or "").strip().lower()
        direction = Direction.DESC if raw_direction == Direction.DESC else Direction.ASC
    else:
        sort_by, direction = DEFAULT_SORT_FIELD, Direction.DESC

    return TaskQuery(
        priority=str(priority) if priority is not None else None,
        is_done=is_done,
        due_date=due_date,
        due_date_invalid=due_date_invalid,
        sort_by=sort_by,
        direction=direction,
        page=parse_page_request(params, max_per_page=max_per_page),
    )
