"""
Integration tests for task log endpoints.
"""

from __future__ import annotations

import pytest
from httpx import AsyncClient


@pytest.fixture
async def task(client: AsyncClient) -> dict:
    response = await client.post("/api/v1/tasks", json={"title": "Write report"})
    return response.json()


class TestTaskLogs:
    @pytest.mark.asyncio
    async def test_add_and_list_newest_first(self, client: AsyncClient, task: dict):
        for content in ("outline done", "draft done"):
            response = await client.post(f"/api/v1/tasks/{task['id']}/logs", json={"content": content})
            assert response.status_code == 201
            assert response.json()["task_id"] == task["id"]

        logs = (await client.get(f"/api/v1/tasks/{task['id']}/logs")).json()
        assert [entry["content"] for entry in logs] == ["draft done", "outline done"]

    @pytest.mark.asyncio
    async def test_content_is_trimmed(self, client: AsyncClient, task: dict):
        response = await client.post(f"/api/v1/tasks/{task['id']}/logs", json={"content": "  spaced  "})
        assert response.json()["content"] == "spaced"

    @pytest.mark.asyncio
    async def test_blank_content_rejected(self, client: AsyncClient, task: dict):
        response = await client.post(f"/api/v1/tasks/{task['id']}/logs", json={"content": "   "})
        assert response.status_code == 400
        assert response.json() == {"error": "Content is required"}
        assert (await client.get(f"/api/v1/tasks/{task['id']}/logs")).json() == []

    @pytest.mark.asyncio
    async def test_log_for_missing_task(self, client: AsyncClient):
        response = await client.post("/api/v1/tasks/999/logs", json={"content": "x"})
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_update_replaces_content_and_refreshes_timestamp(self, client: AsyncClient, task: dict):
        created = (await client.post(f"/api/v1/tasks/{task['id']}/logs", json={"content": "v1"})).json()
        response = await client.put(
            f"/api/v1/tasks/{task['id']}/logs/{created['id']}", json={"content": "v2"}
        )
        assert response.status_code == 200
        updated = response.json()
        assert updated["content"] == "v2"
        assert updated["created_at"] >= created["created_at"]

    @pytest.mark.asyncio
    async def test_log_must_belong_to_task(self, client: AsyncClient, task: dict):
        other = (await client.post("/api/v1/tasks", json={"title": "Other"})).json()
        entry = (await client.post(f"/api/v1/tasks/{task['id']}/logs", json={"content": "mine"})).json()

        response = await client.delete(f"/api/v1/tasks/{other['id']}/logs/{entry['id']}")
        assert response.status_code == 404
        assert response.json() == {"error": "Log entry not found"}

    @pytest.mark.asyncio
    async def test_delete_log(self, client: AsyncClient, task: dict):
        entry = (await client.post(f"/api/v1/tasks/{task['id']}/logs", json={"content": "gone"})).json()
        response = await client.delete(f"/api/v1/tasks/{task['id']}/logs/{entry['id']}")
        assert response.status_code == 200
        assert (await client.get(f"/api/v1/tasks/{task['id']}/logs")).json() == []

    @pytest.mark.asyncio
    async def test_activity_preview_is_capped(self, client: AsyncClient, task: dict):
        content = "x" * 80
        await client.post(f"/api/v1/tasks/{task['id']}/logs", json={"content": content})

        latest = (await client.get("/api/v1/activity-log")).json()[0]
        assert latest["description"] == f'Added log to task "Write report": {"x" * 50}...'
