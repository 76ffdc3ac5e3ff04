"""Document API tests."""

import pytest
from httpx import AsyncClient


async def _create(client: AsyncClient, headers, content: str = "line1\nline2") -> dict:
    resp = await client.post(
        "/api/documents/",
        json={
            "project_id": "demo-project",
            "filename": "demo-story.md",
            "content": content,
            "metadata": {"genre": "fantasy"},
        },
        headers=headers,
    )
    assert resp.status_code == 201
    return resp.json()


@pytest.mark.asyncio
async def test_create_and_get_document(client: AsyncClient, auth_headers):
    doc = await _create(client, auth_headers)
    assert doc["version"] == 1
    assert doc["metadata"] == {"genre": "fantasy"}

    resp = await client.get(f"/api/documents/{doc['id']}")
    assert resp.status_code == 200
    assert resp.json()["content"] == "line1\nline2"

    resp = await client.get("/api/documents/", params={"project_id": "demo-project"})
    assert [d["id"] for d in resp.json()] == [doc["id"]]


@pytest.mark.asyncio
async def test_create_requires_auth(client: AsyncClient):
    resp = await client.post("/api/documents/", json={"project_id": "p", "filename": "f.md"})
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_update_versions_and_diff(client: AsyncClient, auth_headers):
    doc = await _create(client, auth_headers)

    resp = await client.put(
        f"/api/documents/{doc['id']}",
        json={"content": "line1\nline2\nline3", "commit_message": "Add line"},
        headers=auth_headers,
    )
    assert resp.status_code == 200
    assert resp.json()["version"] == 2

    versions = (await client.get(f"/api/documents/{doc['id']}/versions")).json()
    assert [v["commit_message"] for v in versions] == ["Initial creation", "Add line"]

    resp = await client.get(
        f"/api/documents/{doc['id']}/diff", params={"from_version": 1, "to_version": 2}
    )
    assert resp.status_code == 200
    assert resp.json() == {
        "additions": 1,
        "deletions": 0,
        "changes": [{"type": "add", "line_number": 3, "content": "line3"}],
    }


@pytest.mark.asyncio
async def test_revert(client: AsyncClient, auth_headers):
    doc = await _create(client, auth_headers, "first")
    await client.put(f"/api/documents/{doc['id']}", json={"content": "second"}, headers=auth_headers)

    resp = await client.post(
        f"/api/documents/{doc['id']}/revert", json={"version": 1}, headers=auth_headers
    )
    assert resp.status_code == 200
    assert resp.json()["content"] == "first"
    assert resp.json()["version"] == 3
    assert resp.json()["metadata"]["revertedFrom"] == 1

    resp = await client.post(
        f"/api/documents/{doc['id']}/revert", json={"version": 9}, headers=auth_headers
    )
    assert resp.status_code == 404
    assert resp.json()["error"] == "VersionNotFound"


@pytest.mark.asyncio
async def test_get_single_version(client: AsyncClient, auth_headers):
    doc = await _create(client, auth_headers)

    resp = await client.get(f"/api/documents/{doc['id']}/versions/1")
    assert resp.status_code == 200
    assert resp.json()["content"] == "line1\nline2"

    resp = await client.get(f"/api/documents/{doc['id']}/versions/2")
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_delete_document(client: AsyncClient, auth_headers):
    doc = await _create(client, auth_headers)

    resp = await client.delete(f"/api/documents/{doc['id']}", headers=auth_headers)
    assert resp.status_code == 204

    resp = await client.get(f"/api/documents/{doc['id']}")
    assert resp.status_code == 404
    resp = await client.delete(f"/api/documents/{doc['id']}", headers=auth_headers)
    assert resp.status_code == 404
