"""Shared test fixtures for all test groups."""

from datetime import UTC, datetime, timedelta

import pytest

from taskboard.store.memory import InMemoryStore


class TickingClock:
    """Deterministic clock: every call is one second after the previous one."""

    def __init__(self, start: datetime | None = None):
        self.current = start or datetime(2025, 5, 1, 9, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        self.current += timedelta(seconds=1)
        return self.current

    def advance(self, **kwargs) -> None:
        self.current += timedelta(**kwargs)


@pytest.fixture
def clock():
    return TickingClock()


@pytest.fixture
def store(clock):
    """Fresh InMemoryStore driven by the ticking clock."""
    return InMemoryStore(clock=clock)


@pytest.fixture
async def owner(store):
    return await store.create_user("Owner", "owner@example.com")


@pytest.fixture
async def other_user(store):
    return await store.create_user("Other", "other@example.com")


@pytest.fixture
async def project(store, owner):
    return await store.create_project(owner.id, "Launch plan", "Everything for the launch")
