"""
Shared fixtures: an app on a throwaway SQLite file and a scripted model.
"""

from __future__ import annotations

import copy
from typing import Optional

import pytest
from httpx import ASGITransport, AsyncClient

from taskmaster.assistant.loop import ModelReply
from taskmaster.core.config import Settings
from taskmaster.core.database import init_db
from taskmaster.main import create_app
from taskmaster.schemas.assistant import NoteDraft, TaskFormFill


class ScriptedModel:
    """Stands in for Gemini: replays queued replies and records what it was shown."""

    def __init__(self, replies: Optional[list[ModelReply]] = None, *, repeat: Optional[ModelReply] = None):
        self.replies = list(replies or [])
        self.repeat = repeat
        self.seen: list[list[dict]] = []
        self.form_fill = TaskFormFill()
        self.note_draft = NoteDraft(title="Voice note", content="Nothing was said.")
        self.audio: list[tuple[bytes, str]] = []

    def queue(self, *replies: ModelReply) -> None:
        self.replies.extend(replies)

    async def generate(self, contents, declarations):
        self.seen.append(copy.deepcopy(contents))
        if self.replies:
            return self.replies.pop(0)
        if self.repeat is not None:
            return self.repeat
        return ModelReply(text="")

    async def parse_task(self, text):
        return self.form_fill

    async def transcribe_note(self, data, mime_type):
        self.audio.append((data, mime_type))
        if isinstance(self.note_draft, Exception):
            raise self.note_draft
        return self.note_draft


def make_settings(tmp_path, **overrides) -> Settings:
    """Test settings; values from the environment or a .env file are ignored."""
    values = {
        "database_url": f"sqlite+aiosqlite:///{tmp_path / 'taskmaster-test.db'}",
        "auth_enabled": False,
        "gemini_api_key": "",
        "secret_key": "test-secret",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def settings_overrides() -> dict:
    """Override in a test module to change settings for every test in it."""
    return {}


@pytest.fixture
def settings(tmp_path, settings_overrides) -> Settings:
    return make_settings(tmp_path, **settings_overrides)


@pytest.fixture
def model() -> ScriptedModel:
    return ScriptedModel()


@pytest.fixture
async def app(settings, model):
    app = create_app(settings, model_client=model)
    # ASGITransport does not run startup handlers.
    await init_db(app.state.db)
    yield app
    await app.state.db.dispose()


@pytest.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
async def session(app):
    async with app.state.db.session_factory() as session:
        yield session
