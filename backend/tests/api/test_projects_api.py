"""Project endpoints: listing, CRUD and the trash."""

import pytest

pytestmark = pytest.mark.integration


async def test_create_and_show_project(client, owner_headers, owner):
    created = await client.post(
        "/api/projects",
        json={"title": "Website", "description": "Relaunch"},
        headers=owner_headers,
    )

    assert created.status_code == 201
    body = created.json()
    assert body["title"] == "Website"
    assert body["owner_user_id"] == owner.id

    shown = await client.get(f"/api/projects/{body['id']}", headers=owner_headers)
    assert shown.status_code == 200
    assert shown.json()["description"] == "Relaunch"


async def test_create_without_title_is_422_with_field_errors(client, owner_headers):
    response = await client.post("/api/projects", json={"description": "No title"}, headers=owner_headers)

    assert response.status_code == 422
    body = response.json()
    assert body["message"] == "Validation failed"
    assert "title" in body["errors"]
    assert isinstance(body["errors"]["title"], list)


async def test_unknown_user_header_is_401(client):
    response = await client.get("/api/projects", headers={"X-User-Id": "12345"})
    assert response.status_code == 401


async def test_malformed_user_header_is_401(client):
    response = await client.get("/api/projects", headers={"X-User-Id": "owner"})
    assert response.status_code == 401


async def test_listing_is_paginated_with_meta_and_links(client, owner_headers, store, owner):
    for n in range(3):
        await store.create_project(owner.id, f"Project {n}", None)

    response = await client.get("/api/projects?per_page=2", headers=owner_headers)

    assert response.status_code == 200
    body = response.json()
    assert [p["title"] for p in body["data"]] == ["Project 2", "Project 1"]
    assert body["meta"] == {"total": 3, "per_page": 2, "current_page": 1, "last_page": 2}
    assert body["links"]["prev"] is None
    assert "page=2" in body["links"]["next"]
    assert "page=2" in body["links"]["last"]


async def test_listing_defaults_to_fifteen_per_page(client, owner_headers, project):
    body = (await client.get("/api/projects", headers=owner_headers)).json()
    assert body["meta"]["per_page"] == 15
    assert body["meta"]["total"] == 1


async def test_listing_search(client, owner_headers, store, owner):
    await store.create_project(owner.id, "Hiring", "Backend engineers")
    await store.create_project(owner.id, "Offsite", "Venue and travel")

    body = (await client.get("/api/projects?search=engineer", headers=owner_headers)).json()

    assert [p["title"] for p in body["data"]] == ["Hiring"]


async def test_listing_never_shows_other_users_projects(client, other_headers, project):
    body = (await client.get("/api/projects", headers=other_headers)).json()
    assert body["data"] == []


async def test_show_foreign_project_is_403(client, other_headers, project):
    response = await client.get(f"/api/projects/{project.id}", headers=other_headers)
    assert response.status_code == 403


async def test_update_project(client, owner_headers, project):
    response = await client.patch(
        f"/api/projects/{project.id}",
        json={"description": "Updated brief"},
        headers=owner_headers,
    )

    assert response.status_code == 200
    assert response.json()["description"] == "Updated brief"
    assert response.json()["title"] == "Launch plan"


async def test_update_rejects_null_title(client, owner_headers, project):
    response = await client.put(f"/api/projects/{project.id}", json={"title": None}, headers=owner_headers)

    assert response.status_code == 422
    assert "title" in response.json()["errors"]


async def test_delete_moves_project_to_trash(client, owner_headers, project):
    deleted = await client.delete(f"/api/projects/{project.id}", headers=owner_headers)

    assert deleted.status_code == 200
    assert deleted.json() == {"message": "Project deleted successfully"}
    assert (await client.get(f"/api/projects/{project.id}", headers=owner_headers)).status_code == 404

    trash = (await client.get("/api/projects?trashed=only", headers=owner_headers)).json()
    assert [p["id"] for p in trash["data"]] == [project.id]
    assert trash["data"][0]["deleted_at"] is not None


async def test_force_delete(client, owner_headers, project, store):
    response = await client.delete(f"/api/projects/{project.id}/force", headers=owner_headers)

    assert response.status_code == 200
    assert response.json() == {"message": "Project permanently deleted"}
    assert await store.get_project(project.id, include_trashed=True) is None


async def test_force_delete_by_stranger_is_403(client, other_headers, project):
    response = await client.delete(f"/api/projects/{project.id}/force", headers=other_headers)
    assert response.status_code == 403
