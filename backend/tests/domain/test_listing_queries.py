"""Tests for pagination parameters and the project listing query."""

from datetime import UTC, datetime, timedelta

import pytest

from taskboard.domain.entities import Project
from taskboard.domain.pagination import MAX_OFFSET, Page, PageRequest, paginate, parse_page_request, positive_int
from taskboard.domain.project_query import TrashedScope, build_project_query

pytestmark = pytest.mark.unit

BASE = datetime(2025, 5, 1, tzinfo=UTC)


def _project(project_id, *, owner=1, title="Project", description=None, trashed=False):
    created = BASE + timedelta(minutes=project_id)
    return Project(
        id=project_id,
        owner_user_id=owner,
        title=title,
        description=description,
        created_at=created,
        updated_at=created,
        deleted_at=created if trashed else None,
    )


# ============================================================================
# Pagination
# ============================================================================


@pytest.mark.parametrize("value,expected", [("3", 3), (7, 7), ("0", None), ("-2", None), ("x", None), (None, None), (True, None)])
def test_positive_int(value, expected):
    assert positive_int(value) == expected


def test_no_page_size_and_no_default_means_unpaginated():
    assert parse_page_request({}, max_per_page=100) is None


def test_default_page_size_applies():
    request = parse_page_request({"page": "2"}, max_per_page=100, default_per_page=15)
    assert request == PageRequest(per_page=15, page=2)
    assert request.offset == 15


def test_invalid_page_number_falls_back_to_first():
    request = parse_page_request({"per_page": "10", "page": "-4"}, max_per_page=100)
    assert request.page == 1


def test_paginate_slices_and_counts():
    page = paginate(list(range(23)), PageRequest(per_page=10, page=3))
    assert page.items == [20, 21, 22]
    assert page.total == 23
    assert page.last_page == 3


def test_empty_page_still_has_one_page():
    assert Page(items=[], total=0, per_page=15, current_page=1).last_page == 1


# ============================================================================
# Project query
# ============================================================================


def test_defaults_exclude_trashed_and_paginate():
    query = build_project_query(1, {}, default_per_page=15, max_per_page=100)
    assert query.trashed == TrashedScope.EXCLUDE
    assert query.page.per_page == 15
    assert query.search is None


def test_unknown_trashed_value_is_ignored():
    query = build_project_query(1, {"trashed": "everything"}, default_per_page=15, max_per_page=100)
    assert query.trashed == TrashedScope.EXCLUDE


def test_only_own_projects_are_listed():
    projects = [_project(1, owner=1), _project(2, owner=2), _project(3, owner=1)]
    query = build_project_query(1, {}, default_per_page=15, max_per_page=100)
    assert [p.id for p in query.apply(projects)] == [3, 1]


@pytest.mark.parametrize(
    "scope,expected",
    [("", [2]), ("with", [3, 2]), ("only", [3])],
)
def test_trashed_scopes(scope, expected):
    projects = [_project(2), _project(3, trashed=True)]
    query = build_project_query(1, {"trashed": scope}, default_per_page=15, max_per_page=100)
    assert [p.id for p in query.apply(projects)] == expected


def test_search_matches_title_or_description_case_insensitively():
    projects = [
        _project(1, title="Website relaunch"),
        _project(2, title="Budget", description="Q3 WEBSITE costs"),
        _project(3, title="Hiring"),
    ]
    query = build_project_query(1, {"search": "website"}, default_per_page=15, max_per_page=100)
    assert [p.id for p in query.apply(projects)] == [2, 1]


def test_blank_search_is_no_filter():
    query = build_project_query(1, {"search": "   "}, default_per_page=15, max_per_page=100)
    assert query.search is None


def test_huge_page_number_keeps_offset_in_integer_range():
    request = parse_page_request({"per_page": "10", "page": str(10**19)}, max_per_page=100)
    assert request.offset <= MAX_OFFSET
    assert request.offset > 10**17
