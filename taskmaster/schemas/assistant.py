"""Assistant chat and form-fill schemas."""

from __future__ import annotations

from datetime import date
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from .tasks import clean_date, clean_time


class ChatMessage(BaseModel):
    role: Literal["user", "model"]
    text: str


class ChatRequest(BaseModel):
    history: List[ChatMessage] = Field(default_factory=list)


class ChatResponse(BaseModel):
    text: str
    tool_calls: int = 0
    exhausted: bool = False


class TaskParseRequest(BaseModel):
    text: str


class TaskFormFill(BaseModel):
    """Task form fields extracted from free text. Unparseable dates/times come back empty."""

    title: str = ""
    description: str = ""
    task_date: Optional[date] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None

    @field_validator("task_date", mode="before")
    @classmethod
    def _normalize_date(cls, value):
        try:
            return clean_date(value)
        except ValueError:
            return None

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def _normalize_time(cls, value):
        try:
            return clean_time(value)
        except ValueError:
            return None


NOTE_TITLE_MAX = 50


class NoteDraft(BaseModel):
    """A note synthesized from a voice recording; not saved until the user creates it."""

    title: str
    content: str

    @field_validator("title", "content", mode="before")
    @classmethod
    def _require_text(cls, value):
        if not isinstance(value, str) or not value.strip():
            raise ValueError("must be a non-empty string")
        return value.strip()

    @field_validator("title")
    @classmethod
    def _cap_title(cls, value: str) -> str:
        return value[:NOTE_TITLE_MAX]
