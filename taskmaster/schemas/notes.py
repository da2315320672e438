from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

from .common import UTCDateTime, blank_to_none


class NoteCreate(BaseModel):
    title: str = ""
    content: str = ""


class NoteUpdate(BaseModel):
    """Partial update; blank fields keep the stored value."""

    title: Optional[str] = None
    content: Optional[str] = None

    @field_validator("title", "content", mode="before")
    @classmethod
    def _blank_to_none(cls, value):
        return blank_to_none(value)


class NoteRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    content: str
    created_at: UTCDateTime
    updated_at: UTCDateTime
