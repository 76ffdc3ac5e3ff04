"""Agent API tests."""

import pytest
from httpx import AsyncClient

from storymaster.main import app


@pytest.mark.asyncio
async def test_list_agents(client: AsyncClient):
    resp = await client.get("/api/agents/")
    assert resp.status_code == 200
    assert [a["id"] for a in resp.json()] == ["character-psychologist", "plot-architect"]


@pytest.mark.asyncio
async def test_get_agent(client: AsyncClient):
    resp = await client.get("/api/agents/plot-architect")
    assert resp.status_code == 200
    data = resp.json()
    assert data["title"] == "Story Structure Specialist"
    assert data["persona"]["core_principles"] == ["Structure serves story", "Every scene must turn"]
    assert "source_path" not in data


@pytest.mark.asyncio
async def test_get_unknown_agent(client: AsyncClient):
    resp = await client.get("/api/agents/ghost-writer")
    assert resp.status_code == 404
    assert resp.json()["error"] == "AgentNotFound"


@pytest.mark.asyncio
async def test_execute_requires_auth(client: AsyncClient):
    resp = await client.post("/api/agents/plot-architect/execute", json={"action": "Outline"})
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_execute_records_session_and_usage(client: AsyncClient, auth_headers, provider):
    resp = await client.post(
        "/api/agents/plot-architect/execute",
        json={"action": "Outline act one", "content": "Chapter 1", "inputs": {"tone": "bleak"}},
        headers=auth_headers,
    )
    assert resp.status_code == 200
    session = resp.json()["session"]
    assert session["outputs"]["response"] == "The storm broke over the harbour."
    assert session["project_id"] == "default"
    assert resp.json()["document_version"] is None

    me = (await client.get("/api/auth/me", headers=auth_headers)).json()
    assert session["user_id"] == me["id"]
    assert me["tokens_used"] == session["usage"]["tokens_used"]

    history = app.state.monitor.history
    assert [s.id for s in history] == [session["id"]]
    assert "tone: bleak" in provider.calls[0]


@pytest.mark.asyncio
async def test_execute_with_document_applies_response(client: AsyncClient, auth_headers, provider):
    created = await client.post(
        "/api/documents/",
        json={"project_id": "novel", "filename": "ch1.md", "content": "Draft one"},
        headers=auth_headers,
    )
    doc_id = created.json()["id"]

    resp = await client.post(
        "/api/agents/plot-architect/execute",
        json={"action": "Rewrite", "document_id": doc_id, "apply": True},
        headers=auth_headers,
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["document_version"] == 2
    assert body["session"]["project_id"] == "novel"
    assert body["session"]["document_id"] == doc_id
    assert "Draft one" in provider.calls[0]

    doc = (await client.get(f"/api/documents/{doc_id}")).json()
    assert doc["content"] == "The storm broke over the harbour."
    versions = (await client.get(f"/api/documents/{doc_id}/versions")).json()
    assert versions[-1]["commit_message"] == "Agent plot-architect: Rewrite"


@pytest.mark.asyncio
async def test_execute_over_quota(client: AsyncClient, auth_headers, provider):
    resp = await client.post(
        "/api/agents/plot-architect/execute",
        json={"action": "x" * 8000},  # ~2000 tokens, free plan allows 1000
        headers=auth_headers,
    )
    assert resp.status_code == 429
    assert resp.json()["details"]["plan"] == "free"
    assert provider.calls == []


@pytest.mark.asyncio
async def test_execute_large_max_tokens_over_quota(client: AsyncClient, auth_headers, provider):
    resp = await client.post(
        "/api/agents/plot-architect/execute",
        json={"action": "Outline", "options": {"max_tokens": 50000}},
        headers=auth_headers,
    )
    assert resp.status_code == 429
    assert resp.json()["details"]["requested"] == 2 + 50000
    assert provider.calls == []


@pytest.mark.asyncio
async def test_execute_explicit_max_tokens_within_quota(client: AsyncClient, auth_headers, provider):
    resp = await client.post(
        "/api/agents/plot-architect/execute",
        json={"action": "Outline", "options": {"max_tokens": 500}},
        headers=auth_headers,
    )
    assert resp.status_code == 200
    assert provider.max_tokens == [500]


@pytest.mark.asyncio
async def test_execute_default_budget_shrinks_to_remaining_quota(
    client: AsyncClient, auth_headers, provider
):
    # "Outline" estimates to 2 tokens, leaving 998 of the free plan's 1000
    resp = await client.post(
        "/api/agents/plot-architect/execute",
        json={"action": "Outline"},
        headers=auth_headers,
    )
    assert resp.status_code == 200
    assert provider.max_tokens == [998]


@pytest.mark.asyncio
async def test_execute_provider_failure_counts_error(client: AsyncClient, auth_headers, provider):
    provider.fail = True
    resp = await client.post(
        "/api/agents/plot-architect/execute",
        json={"action": "Outline"},
        headers=auth_headers,
    )
    assert resp.status_code == 502
    assert resp.json()["error"] == "AllProvidersFailed"
    assert app.state.monitor.error_count == 1


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    resp = await client.get("/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "healthy"
    assert data["agents"] == 2
    assert data["providers"] == ["Fake"]
