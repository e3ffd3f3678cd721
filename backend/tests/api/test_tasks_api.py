"""Task endpoints, nested under a project and addressed directly."""

from datetime import date

import pytest

pytestmark = pytest.mark.integration


@pytest.fixture
async def seeded_tasks(store, project):
    tasks = []
    for title, priority, due, done in (
        ("Book venue", "high", date(2025, 5, 1), False),
        ("Print flyers", "low", date(2025, 5, 1), True),
        ("Send invites", "medium", date(2025, 5, 2), False),
    ):
        tasks.append(
            await store.create_task(
                project.id,
                {"title": title, "priority": priority, "due_date": due, "is_done": done},
            )
        )
    return tasks


def _titles(response) -> list[str]:
    return [task["title"] for task in response.json()["data"]]


async def test_list_is_a_plain_collection_newest_first(client, owner_headers, project, seeded_tasks):
    response = await client.get(f"/api/projects/{project.id}/tasks", headers=owner_headers)

    assert response.status_code == 200
    assert set(response.json()) == {"data"}
    assert _titles(response) == ["Send invites", "Print flyers", "Book venue"]


async def test_list_filters_compose(client, owner_headers, project, seeded_tasks):
    response = await client.get(
        f"/api/projects/{project.id}/tasks",
        params={"due_date": "2025-05-01", "done": "false"},
        headers=owner_headers,
    )
    assert _titles(response) == ["Book venue"]


async def test_list_priority_sort(client, owner_headers, project, seeded_tasks):
    response = await client.get(
        f"/api/projects/{project.id}/tasks",
        params={"sort_by": "priority", "direction": "desc"},
        headers=owner_headers,
    )
    assert [t["priority"] for t in response.json()["data"]] == ["high", "medium", "low"]


async def test_malformed_due_date_returns_empty_list(client, owner_headers, project, seeded_tasks):
    response = await client.get(
        f"/api/projects/{project.id}/tasks",
        params={"due_date": "next tuesday"},
        headers=owner_headers,
    )
    assert response.status_code == 200
    assert response.json() == {"data": []}


async def test_list_paginates_with_per_page(client, owner_headers, project, seeded_tasks):
    response = await client.get(
        f"/api/projects/{project.id}/tasks",
        params={"per_page": 2},
        headers=owner_headers,
    )

    body = response.json()
    assert body["meta"]["total"] == 3
    assert body["meta"]["last_page"] == 2
    assert len(body["data"]) == 2


async def test_list_for_stranger_is_403(client, other_headers, project, seeded_tasks):
    response = await client.get(f"/api/projects/{project.id}/tasks", headers=other_headers)
    assert response.status_code == 403


async def test_create_task_accepts_done_alias(client, owner_headers, project):
    response = await client.post(
        f"/api/projects/{project.id}/tasks",
        json={"title": "Confirm catering", "done": True, "priority": "high", "due_date": "2025-05-03"},
        headers=owner_headers,
    )

    assert response.status_code == 201
    body = response.json()
    assert body["is_done"] is True
    assert body["due_date"] == "2025-05-03"
    assert body["project_id"] == project.id


async def test_create_task_rejects_unknown_priority(client, owner_headers, project):
    response = await client.post(
        f"/api/projects/{project.id}/tasks",
        json={"title": "Whatever", "priority": "urgent"},
        headers=owner_headers,
    )

    assert response.status_code == 422
    assert "priority" in response.json()["errors"]


async def test_nested_task_of_another_project_is_404(client, owner_headers, owner, store, seeded_tasks):
    elsewhere = await store.create_project(owner.id, "Elsewhere", None)

    response = await client.get(f"/api/projects/{elsewhere.id}/tasks/{seeded_tasks[0].id}", headers=owner_headers)

    assert response.status_code == 404
    assert response.json() == {"message": "Task not found"}


async def test_flat_task_routes(client, owner_headers, seeded_tasks):
    task = seeded_tasks[0]

    shown = await client.get(f"/api/tasks/{task.id}", headers=owner_headers)
    updated = await client.patch(f"/api/tasks/{task.id}", json={"is_done": True}, headers=owner_headers)
    deleted = await client.delete(f"/api/tasks/{task.id}", headers=owner_headers)
    gone = await client.get(f"/api/tasks/{task.id}", headers=owner_headers)

    assert shown.json()["title"] == "Book venue"
    assert updated.json()["is_done"] is True
    assert deleted.json() == {"message": "Task deleted successfully"}
    assert gone.status_code == 404


async def test_flat_task_of_stranger_is_403(client, other_headers, seeded_tasks):
    response = await client.patch(f"/api/tasks/{seeded_tasks[0].id}", json={"title": "Mine now"}, headers=other_headers)
    assert response.status_code == 403
