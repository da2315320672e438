"""
Integration tests for note endpoints.
"""

from __future__ import annotations

import pytest
from httpx import AsyncClient


async def _create(client: AsyncClient, title: str, content: str) -> dict:
    response = await client.post("/api/v1/notes", json={"title": title, "content": content})
    assert response.status_code == 201, response.text
    return response.json()


class TestNotes:
    @pytest.mark.asyncio
    async def test_create_and_get(self, client: AsyncClient):
        note = await _create(client, "Ideas", "Build a shed")
        response = await client.get(f"/api/v1/notes/{note['id']}")
        assert response.status_code == 200
        assert response.json()["content"] == "Build a shed"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [{"title": "only title"}, {"content": "only content"}, {}])
    async def test_create_requires_title_and_content(self, client: AsyncClient, body: dict):
        response = await client.post("/api/v1/notes", json=body)
        assert response.status_code == 400
        assert (await client.get("/api/v1/notes")).json() == []

    @pytest.mark.asyncio
    async def test_update_merges(self, client: AsyncClient):
        note = await _create(client, "Groceries", "milk")
        response = await client.put(f"/api/v1/notes/{note['id']}", json={"content": "milk, eggs", "title": ""})
        assert response.status_code == 200
        assert response.json()["title"] == "Groceries"
        assert response.json()["content"] == "milk, eggs"

    @pytest.mark.asyncio
    async def test_update_needs_a_field(self, client: AsyncClient):
        note = await _create(client, "Groceries", "milk")
        response = await client.put(f"/api/v1/notes/{note['id']}", json={})
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_list_most_recently_updated_first(self, client: AsyncClient):
        first = await _create(client, "first", "a")
        await _create(client, "second", "b")
        await client.put(f"/api/v1/notes/{first['id']}", json={"content": "a2"})

        titles = [n["title"] for n in (await client.get("/api/v1/notes")).json()]
        assert titles == ["first", "second"]

    @pytest.mark.asyncio
    async def test_delete_is_permanent(self, client: AsyncClient):
        note = await _create(client, "Temp", "x")
        assert (await client.delete(f"/api/v1/notes/{note['id']}")).status_code == 200
        assert (await client.get(f"/api/v1/notes/{note['id']}")).status_code == 404
        assert (await client.get("/api/v1/trash")).json() == []

    @pytest.mark.asyncio
    async def test_missing_note(self, client: AsyncClient):
        response = await client.get("/api/v1/notes/12345")
        assert response.status_code == 404
        assert response.json() == {"error": "Note not found"}

    @pytest.mark.asyncio
    async def test_one_activity_entry_per_mutation(self, client: AsyncClient):
        long_title = "T" * 60
        note = await _create(client, long_title, "body")
        await client.put(f"/api/v1/notes/{note['id']}", json={"content": "new body"})
        await client.get(f"/api/v1/notes/{note['id']}")
        await client.delete(f"/api/v1/notes/{note['id']}")

        feed = [e["description"] for e in (await client.get("/api/v1/activity-log")).json()]
        capped = "T" * 50 + "..."
        assert feed == [
            f'Deleted note: "{capped}"',
            f'Updated note: "{capped}"',
            f'Created note: "{capped}"',
        ]
