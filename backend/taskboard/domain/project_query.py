"""Project listing query for an owner's own projects."""

from collections.abc import Mapping
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from taskboard.domain.entities import Project
from taskboard.domain.pagination import PageRequest, parse_page_request


class TrashedScope(StrEnum):
    """Which lifecycle states a project listing admits."""

    EXCLUDE = "exclude"
    WITH = "with"
    ONLY = "only"


@dataclass(frozen=True)
class ProjectQuery:
    owner_user_id: int
    page: PageRequest
    search: str | None = None
    trashed: TrashedScope = TrashedScope.EXCLUDE

    def matches(self, project: Project) -> bool:
        if project.owner_user_id != self.owner_user_id:
            return False
        if self.trashed == TrashedScope.EXCLUDE and project.is_trashed:
            return False
        if self.trashed == TrashedScope.ONLY and not project.is_trashed:
            return False
        if self.search:
            needle = self.search.lower()
            haystacks = (project.title or "", project.description or "")
            if not any(needle in text.lower() for text in haystacks):
                return False
        return True

    def apply(self, projects: list[Project]) -> list[Project]:
        """Filter and order newest first."""
        selected = [project for project in projects if self.matches(project)]
        return sorted(selected, key=lambda p: (p.created_at, p.id), reverse=True)


def build_project_query(
    owner_user_id: int,
    params: Mapping[str, Any],
    *,
    default_per_page: int,
    max_per_page: int,
) -> ProjectQuery:
    """Build a ProjectQuery. Project listings are always paginated."""
    search = params.get("search")
    search = str(search).strip() if search is not None else None

    raw_trashed = str(params.get("trashed") or "").strip().lower()
    try:
        trashed = TrashedScope(raw_trashed)
    except ValueError:
        trashed = TrashedScope.EXCLUDE

    page = parse_page_request(params, max_per_page=max_per_page, default_per_page=default_per_page)
    return ProjectQuery(owner_user_id=owner_user_id, page=page, search=search or None, trashed=trashed)
