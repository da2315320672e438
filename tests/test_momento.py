"""
Momento task tests.

Tests cover:
- The pure resolver: id, substring, word and single-active strategies, ambiguity
- Start/finish/active/log endpoints and their activity entries
- Failed finishes leave every task untouched
"""

from __future__ import annotations

from datetime import timedelta

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from taskmaster.core.timeutils import utcnow
from taskmaster.models.task import Task
from taskmaster.services.momento import (
    AmbiguousMatch,
    NoMatch,
    UniqueMatch,
    resolve_momento_task,
)


def _active(task_id: int, title: str) -> Task:
    return Task(
        id=task_id,
        title=title,
        status="in_progress",
        is_momento_task=True,
        momento_start_timestamp=utcnow(),
    )


async def _start(client: AsyncClient, title: str, **extra) -> dict:
    response = await client.post("/api/v1/momento/start", json={"title": title, **extra})
    assert response.status_code == 201, response.text
    return response.json()


# ---------------------------------------------------------------------------
# Unit tests: resolver
# ---------------------------------------------------------------------------


class TestResolver:
    def test_no_candidates(self):
        assert resolve_momento_task([], "anything") == NoMatch([])

    def test_numeric_id(self):
        tasks = [_active(7, "Write report"), _active(3, "Read book")]
        result = resolve_momento_task(tasks, 3)
        assert isinstance(result, UniqueMatch)
        assert result.task.id == 3

    def test_numeric_string_id(self):
        tasks = [_active(7, "Write report"), _active(3, "Read book")]
        assert resolve_momento_task(tasks, " 7 ").task.id == 7

    def test_numeric_never_falls_back(self):
        only = [_active(7, "Write report")]
        result = resolve_momento_task(only, "99")
        assert isinstance(result, NoMatch)
        assert result.candidates == only

    def test_substring_case_insensitive(self):
        tasks = [_active(1, "Write REPORT"), _active(2, "Read book")]
        assert resolve_momento_task(tasks, "report").task.id == 1

    def test_word_match(self):
        tasks = [_active(1, "Quarterly report"), _active(2, "Read book")]
        assert resolve_momento_task(tasks, "finish the report please").task.id == 1

    def test_short_words_ignored(self):
        tasks = [_active(1, "Go to gym"), _active(2, "Read book")]
        assert isinstance(resolve_momento_task(tasks, "to go"), NoMatch)

    def test_single_active_fallback(self):
        only = [_active(4, "Cooking")]
        assert resolve_momento_task(only, "the thing").task.id == 4

    def test_multiple_matches_are_ambiguous(self):
        tasks = [_active(1, "Design review"), _active(2, "Design doc"), _active(3, "Lunch")]
        result = resolve_momento_task(tasks, "design")
        assert isinstance(result, AmbiguousMatch)
        assert [t.id for t in result.candidates] == [1, 2]

    def test_ambiguous_word_match(self):
        tasks = [_active(1, "Review budget"), _active(2, "Review slides")]
        assert isinstance(resolve_momento_task(tasks, "quick review"), AmbiguousMatch)

    def test_no_match_lists_all_candidates(self):
        tasks = [_active(1, "Design review"), _active(2, "Lunch")]
        result = resolve_momento_task(tasks, "gardening")
        assert isinstance(result, NoMatch)
        assert len(result.candidates) == 2


# ---------------------------------------------------------------------------
# Integration tests: endpoints
# ---------------------------------------------------------------------------


class TestStartMomento:
    @pytest.mark.asyncio
    async def test_start_creates_active_task_with_log(self, client: AsyncClient):
        task = await _start(client, "Write report")
        assert task["is_momento_task"] is True
        assert task["status"] == "in_progress"
        assert task["momento_end_timestamp"] is None
        assert task["description"] == "Started working on: Write report"
        assert task["log_recorded"] is True

        logs = (await client.get(f"/api/v1/tasks/{task['id']}/logs")).json()
        assert len(logs) == 1
        assert logs[0]["content"].startswith("Started momento task at ")

    @pytest.mark.asyncio
    async def test_start_records_single_activity_entry(self, client: AsyncClient):
        await _start(client, "Write report", description="Q3")
        feed = [e["description"] for e in (await client.get("/api/v1/activity-log")).json()]
        assert feed == ['Started momento task: "Write report"']

    @pytest.mark.asyncio
    async def test_start_requires_title(self, client: AsyncClient):
        response = await client.post("/api/v1/momento/start", json={"title": " "})
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_active_lists_newest_first_with_duration(self, client: AsyncClient):
        await _start(client, "first")
        await _start(client, "second")
        active = (await client.get("/api/v1/momento/active")).json()
        assert [t["title"] for t in active] == ["second", "first"]
        assert all(t["current_duration"] == "0m" for t in active)


class TestFinishMomento:
    @pytest.mark.asyncio
    async def test_start_then_finish_by_fragment(self, client: AsyncClient):
        started = await _start(client, "Write report")
        response = await client.post("/api/v1/momento/finish", json={"task_identifier": "report"})
        assert response.status_code == 200
        finished = response.json()

        assert finished["id"] == started["id"]
        assert finished["status"] == "completed"
        assert finished["momento_end_timestamp"] > finished["momento_start_timestamp"]
        assert finished["duration"] == "0m"

        assert (await client.get("/api/v1/momento/active")).json() == []
        logs = (await client.get(f"/api/v1/tasks/{started['id']}/logs")).json()
        assert logs[0]["content"].startswith("Completed momento task at ")
        assert logs[0]["content"].endswith("Duration: 0m")

    @pytest.mark.asyncio
    async def test_duration_reflects_elapsed_minutes(self, client: AsyncClient, session: AsyncSession):
        started = await _start(client, "Long haul")
        task = await session.get(Task, started["id"])
        task.momento_start_timestamp = utcnow() - timedelta(seconds=5400)
        session.add(task)
        await session.commit()

        response = await client.post("/api/v1/momento/finish", json={"task_identifier": started["id"]})
        assert response.json()["duration"] == "1h 30m"

        feed = (await client.get("/api/v1/activity-log")).json()
        assert feed[0]["description"] == 'Finished momento task: "Long haul" (1h 30m)'

    @pytest.mark.asyncio
    async def test_no_active_tasks(self, client: AsyncClient):
        await client.post("/api/v1/tasks", json={"title": "regular"})
        response = await client.post("/api/v1/momento/finish", json={"task_identifier": "regular"})
        assert response.status_code == 404
        assert response.json()["error"] == "No active momento tasks found to finish."

        task = (await client.get("/api/v1/tasks")).json()[0]
        assert task["status"] == "pending"

    @pytest.mark.asyncio
    async def test_ambiguous_lists_candidates_and_mutates_nothing(self, client: AsyncClient):
        review = await _start(client, "Design review")
        doc = await _start(client, "Design doc")
        before = len((await client.get("/api/v1/activity-log")).json())

        response = await client.post("/api/v1/momento/finish", json={"task_identifier": "design"})
        assert response.status_code == 409
        message = response.json()["error"]
        assert f'"Design review" (ID: {review["id"]})' in message
        assert f'"Design doc" (ID: {doc["id"]})' in message

        active = (await client.get("/api/v1/momento/active")).json()
        assert len(active) == 2
        assert len((await client.get("/api/v1/activity-log")).json()) == before

    @pytest.mark.asyncio
    async def test_no_match_enumerates_active_tasks(self, client: AsyncClient):
        first = await _start(client, "Design review")
        second = await _start(client, "Lunch")
        response = await client.post("/api/v1/momento/finish", json={"task_identifier": "gardening"})
        assert response.status_code == 404
        message = response.json()["error"]
        assert message.startswith('Could not find momento task "gardening".')
        assert f'(ID: {first["id"]})' in message
        assert f'(ID: {second["id"]})' in message

    @pytest.mark.asyncio
    async def test_single_active_fallback(self, client: AsyncClient):
        started = await _start(client, "Cooking dinner")
        response = await client.post("/api/v1/momento/finish", json={"task_identifier": "that thing"})
        assert response.status_code == 200
        assert response.json()["id"] == started["id"]


class TestAutoLog:
    @pytest.mark.asyncio
    async def test_no_active_task(self, client: AsyncClient):
        response = await client.post("/api/v1/momento/log", json={"content": "progress"})
        assert response.status_code == 200
        assert response.json()["logged"] is False

    @pytest.mark.asyncio
    async def test_logs_to_most_recent_active(self, client: AsyncClient):
        await _start(client, "older")
        newest = await _start(client, "newer")

        response = await client.post("/api/v1/momento/log", json={"content": "halfway"})
        body = response.json()
        assert body["logged"] is True
        assert body["task"]["id"] == newest["id"]
        assert body["log"]["content"] == "halfway"
        assert "newer" in body["message"]
