"""Tests for the project restore workflow.

Uses InMemoryStore with a ticking clock so timestamps are deterministic.
"""

import asyncio

import pytest

from taskboard.domain.errors import ErrorKind
from taskboard.domain.project_query import build_project_query
from taskboard.domain.restore import ProjectRestoreWorkflow, ProjectState, restore_project, state_of
from taskboard.store.memory import InMemoryStore

pytestmark = pytest.mark.unit


@pytest.fixture
async def trashed(store, project, clock):
    await store.soft_delete_project(project.id, clock())
    return await store.get_project(project.id, include_trashed=True)


class LosingRaceStore(InMemoryStore):
    """Store where a concurrent restore lands between the read and the write."""

    async def restore_if_trashed(self, project_id, now):
        await super().restore_if_trashed(project_id, now)
        return await super().restore_if_trashed(project_id, now)


def test_transition_table():
    workflow = ProjectRestoreWorkflow(InMemoryStore())
    assert workflow.can_transition(ProjectState.TRASHED, ProjectState.ACTIVE)
    assert not workflow.can_transition(ProjectState.ACTIVE, ProjectState.ACTIVE)


async def test_owner_restores_trashed_project(store, owner, trashed, clock):
    """Owner restore clears deleted_at and bumps updated_at."""
    outcome = await restore_project(store, trashed.id, owner, clock)

    assert outcome.ok
    restored = outcome.value
    assert restored.deleted_at is None
    assert restored.updated_at > trashed.updated_at
    assert state_of(restored) == ProjectState.ACTIVE

    stored = await store.get_project(trashed.id)
    assert stored is not None
    assert stored.deleted_at is None


async def test_restored_project_reappears_in_default_listing(store, owner, trashed, clock):
    query = build_project_query(owner.id, {}, default_per_page=15, max_per_page=100)
    assert (await store.list_projects(query)).total == 0

    await restore_project(store, trashed.id, owner, clock)

    listed = await store.list_projects(query)
    assert [p.id for p in listed.items] == [trashed.id]


async def test_non_owner_is_forbidden_and_project_stays_trashed(store, other_user, trashed, clock):
    outcome = await restore_project(store, trashed.id, other_user, clock)

    assert not outcome.ok
    assert outcome.kind == ErrorKind.FORBIDDEN
    assert outcome.message == "Unauthorized"
    stored = await store.get_project(trashed.id, include_trashed=True)
    assert stored.deleted_at == trashed.deleted_at


async def test_restoring_active_project_is_invalid_state(store, owner, project, clock):
    outcome = await restore_project(store, project.id, owner, clock)

    assert outcome.kind == ErrorKind.INVALID_STATE
    assert outcome.message == "Project is not deleted"
    assert outcome.status_code == 400


async def test_second_restore_is_invalid_state_not_success(store, owner, trashed, clock):
    first = await restore_project(store, trashed.id, owner, clock)
    second = await restore_project(store, trashed.id, owner, clock)
    third = await restore_project(store, trashed.id, owner, clock)

    assert first.ok
    assert second.kind == ErrorKind.INVALID_STATE
    assert third.kind == ErrorKind.INVALID_STATE


async def test_missing_project_is_not_found(store, owner):
    outcome = await restore_project(store, 999999, owner)

    assert outcome.kind == ErrorKind.NOT_FOUND
    assert outcome.message == "Project not found"


async def test_missing_project_is_not_found_even_for_strangers(store, other_user):
    """Existence is checked before ownership."""
    outcome = await restore_project(store, 424242, other_user)
    assert outcome.kind == ErrorKind.NOT_FOUND


async def test_ownership_checked_before_state(store, other_user, project):
    """A stranger restoring an active project learns nothing about its state."""
    outcome = await restore_project(store, project.id, other_user)
    assert outcome.kind == ErrorKind.FORBIDDEN


async def test_missing_actor_is_unauthenticated(store, trashed):
    outcome = await restore_project(store, trashed.id, None)
    assert outcome.kind == ErrorKind.UNAUTHENTICATED


async def test_storage_fault_during_write(clock):
    store = InMemoryStore(clock=clock, fail_on={"restore_if_trashed"})
    user = await store.create_user("Owner", "owner@example.com")
    project = await store.create_project(user.id, "Archive", None)
    await store.soft_delete_project(project.id, clock())

    outcome = await restore_project(store, project.id, user, clock)

    assert outcome.kind == ErrorKind.STORAGE_FAILURE
    assert outcome.message == "Error restoring project"
    assert outcome.status_code == 500
    stored = await store.get_project(project.id, include_trashed=True)
    assert stored.is_trashed


async def test_storage_fault_during_read(clock):
    store = InMemoryStore(clock=clock, fail_on={"get_project"})
    user = await store.create_user("Owner", "owner@example.com")

    outcome = await restore_project(store, 1, user, clock)

    assert outcome.kind == ErrorKind.STORAGE_FAILURE


async def test_lost_race_reports_invalid_state(clock):
    store = LosingRaceStore(clock=clock)
    user = await store.create_user("Owner", "owner@example.com")
    project = await store.create_project(user.id, "Shared", None)
    await store.soft_delete_project(project.id, clock())

    outcome = await restore_project(store, project.id, user, clock)

    assert outcome.kind == ErrorKind.INVALID_STATE
    stored = await store.get_project(project.id)
    assert stored is not None


async def test_concurrent_restores_succeed_exactly_once(store, owner, trashed, clock):
    outcomes = await asyncio.gather(
        restore_project(store, trashed.id, owner, clock),
        restore_project(store, trashed.id, owner, clock),
    )

    assert sum(1 for outcome in outcomes if outcome.ok) == 1
    assert [o.kind for o in outcomes if not o.ok] == [ErrorKind.INVALID_STATE]
